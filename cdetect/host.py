#
#  Host fingerprint: compiler, kernel and cpu as reported by a probe program
#
#  The probe prints a single line:
#
#    ### <compiler>:<hex version> <kernel>:<hex version> <cpu>:<hex version>
#
#  Versions pack major/minor/patch as 8/8/16 bits.
#

import logging

from cdetect.formatter import scan

log = logging.getLogger(__name__)

HOST_FORMAT = '### %^[^:]:%x %^[^:]:%x %^[^:]:%x'
PARTS = ('compiler', 'kernel', 'cpu')


def split_version(number):
    return ((number & 0xFF000000) >> 24,
            (number & 0x00FF0000) >> 16,
            (number & 0x0000FFFF))


class HostInfo(object):

    def __init__(self):
        self.names = dict.fromkeys(PARTS)
        self.versions = dict.fromkeys(PARTS, 0)
        self.checked = set()

    @classmethod
    def parse(cls, output):
        """Build a HostInfo from probe output; None if no line matches"""
        for line in str(output).splitlines():
            count, values = scan(line.strip('\r'), HOST_FORMAT)
            if count != 6:
                continue
            info = cls()
            for i, part in enumerate(PARTS):
                name = values[2 * i].content
                if name:
                    info.names[part] = name
                    info.versions[part] = values[2 * i + 1] or 0
            return info
        log.debug('no host line in %r', str(output))
        return None

    def name(self, part):
        return self.names[part]

    def version(self, part):
        return self.versions[part]

    def describe(self, part):
        """Text used by the 'checking <part>...' lines"""
        name = self.names[part]
        if name is None:
            return 'Unknown'
        number = self.versions[part]
        if number == 0:
            return name
        return '{} {}.{}.{}'.format(name, *split_version(number))


# Fingerprint program, compiled and run by Session when no other source
# has been registered.
HOST_SOURCE = r'''#include <stdio.h>
#include <stdlib.h>
#include <string.h>
#if defined(unix) || defined(__unix) || defined(__unix__) || defined(__APPLE__)
# include <sys/utsname.h>
# define HOST_HAVE_UNAME 1
#endif

#define HOST_VERSION(a, b, c) \
    ((((unsigned int)(a) & 0xFF) << 24) | (((unsigned int)(b) & 0xFF) << 16) | ((unsigned int)(c) & 0xFFFF))

static const char *compiler_get(unsigned int *version)
{
#if defined(__INTEL_COMPILER)
    *version = HOST_VERSION(__INTEL_COMPILER / 100, __INTEL_COMPILER % 100 / 10, 0);
    return "icc";
#elif defined(__clang__)
    *version = HOST_VERSION(__clang_major__, __clang_minor__, __clang_patchlevel__);
    return "clang";
#elif defined(__GNUC__)
# if defined(__GNUC_PATCHLEVEL__)
    *version = HOST_VERSION(__GNUC__, __GNUC_MINOR__, __GNUC_PATCHLEVEL__);
# else
    *version = HOST_VERSION(__GNUC__, __GNUC_MINOR__, 0);
# endif
    return "gcc";
#elif defined(_MSC_VER)
    *version = HOST_VERSION(_MSC_VER / 100, _MSC_VER % 100, 0);
    return "msc";
#elif defined(__SUNPRO_C)
    *version = HOST_VERSION(__SUNPRO_C >> 8, (__SUNPRO_C >> 4) & 0xF, __SUNPRO_C & 0xF);
    return "sunpro";
#elif defined(__xlC__)
    *version = HOST_VERSION(__xlC__ >> 8, __xlC__ & 0xFF, 0);
    return "xlc";
#else
    *version = 0;
    return "";
#endif
}

static const char *kernel_get(unsigned int *version)
{
#if defined(HOST_HAVE_UNAME)
    static struct utsname info;
    unsigned int major = 0, minor = 0, patch = 0;
    char *p;

    *version = 0;
    if (uname(&info) < 0)
        return "";
    for (p = info.sysname; *p; ++p) {
        if (*p >= 'A' && *p <= 'Z')
            *p = (char)(*p - 'A' + 'a');
        else if (*p == ' ' || *p == ':')
            *p = '_';
    }
    if (sscanf(info.release, "%u.%u.%u", &major, &minor, &patch) >= 1)
        *version = HOST_VERSION(major, minor, patch);
    return info.sysname;
#elif defined(_WIN32)
    *version = 0;
    return "win32";
#else
    *version = 0;
    return "";
#endif
}

static const char *cpu_get(unsigned int *version)
{
    *version = 0;
#if defined(__x86_64__) || defined(__amd64__) || defined(_M_X64)
    return "amd64";
#elif defined(__aarch64__) || defined(_M_ARM64)
    return "arm64";
#elif defined(__arm__) || defined(_M_ARM)
    return "arm";
#elif defined(__i386__) || defined(_M_IX86)
    return "x86";
#elif defined(__ia64__) || defined(_M_IA64)
    return "ia64";
#elif defined(__powerpc__) || defined(__ppc__) || defined(_M_PPC)
    return "powerpc";
#elif defined(__sparc__) || defined(__sparc)
    return "sparc";
#elif defined(__mips__) || defined(__mips)
    return "mips";
#elif defined(__riscv)
    return "riscv";
#elif defined(__s390__)
    return "s390";
#else
    return "";
#endif
}

int main(void)
{
    unsigned int compiler_version, kernel_version, cpu_version;
    const char *compiler = compiler_get(&compiler_version);
    const char *kernel = kernel_get(&kernel_version);
    const char *cpu = cpu_get(&cpu_version);

    printf("### %s:%x %s:%x %s:%x\n",
           compiler, compiler_version,
           kernel, kernel_version,
           cpu, cpu_version);
    return 0;
}
'''
