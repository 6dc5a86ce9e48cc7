"""
Recipes that emulate the common autoconf macros on top of a Session.

Each ac_* function takes the session as its first argument and reports
through it, so they can be mixed freely with direct session calls::

    with Session() as config:
        register_autoconf(config)
        if config.options(sys.argv):
            ac_init(config, 'hello', '1.0')
            ac_prefix(config)
            ac_header_stdc(config)
"""

import os
import logging

log = logging.getLogger(__name__)

# shell helpers, SHELL falls back to 'sh' when ac_prog_shell was not run
FORMAT_RUN_SH = "@SHELL=sh@ -c %'s"

INSTALL_DIRS = [
    # (option, default, help)
    ('bindir', '${exec_prefix}/bin', 'User executables'),
    ('sbindir', '${exec_prefix}/sbin', 'System administrator executables'),
    ('libexecdir', '${exec_prefix}/libexec', 'Program executables'),
    ('datadir', '${exec_prefix}/share', 'Read-only generic data'),
    ('sysconfdir', '${prefix}/etc', 'Read-only machine data'),
    ('sharedstatedir', '${prefix}/com', 'Modifiable generic data'),
    ('localstatedir', '${prefix}/var', 'Modifiable machine data'),
    ('libdir', '${exec_prefix}/lib', 'Libraries'),
    ('includedir', '${prefix}/include', 'Header files'),
    ('oldincludedir', '/usr/include', 'Native header files'),
    ('infodir', '${prefix}/info', 'Info documentation'),
    ('mandir', '${prefix}/man', 'Man documentation'),
]


def register_autoconf(config):
    """Switch to HAVE_* macro names and add the installation options"""
    config.register_header('config.h')
    config.register_header_format('HAVE_%s')
    config.register_function_format('HAVE_%s')
    config.register_library_format('HAVE_LIB%s')
    config.register_type_format('HAVE_%s')

    config.register_option_group('Installation')
    config.register_option('prefix', None, '/usr/local', None,
                           'Installation prefix')
    config.register_option('exec_prefix', None, '${prefix}', None,
                           'Executable installation prefix')

    config.register_option_group('Installation fine tuning')
    for name, default, help in INSTALL_DIRS:
        config.register_option(name, None, default, None, help)


def ac_prefix(config):
    """Make the installation directories available to templates"""
    if not config.get_option('prefix'):
        return
    config.define_tool('prefix', config.get_option('prefix'))
    config.define_tool('exec_prefix', config.get_option('exec_prefix'))
    for name, default, help in INSTALL_DIRS:
        config.define_tool(name, config.get_option(name))


def ac_init(config, name, version, bugreport=None, url=None, release=None):
    """Package identification macros (quoted) and tool variables"""
    tarname = '-'.join([name, release]) if release else name
    config.add_macro_format('PACKAGE_NAME', "%'s", name)
    config.add_macro_format('PACKAGE_TARNAME', "%'s", tarname)
    config.add_macro_format('PACKAGE_VERSION', "%'s", version)
    config.add_macro_format('PACKAGE_STRING', "%'s", ' '.join([name, version]))
    config.add_macro_format('PACKAGE_BUGREPORT', "%'s", bugreport or '')
    config.add_macro_format('PACKAGE_URL', "%'s", url or '')
    config.add_macro_format('PACKAGE', "%'s", tarname)
    config.add_macro_format('VERSION', "%'s", version)

    config.define_tool('PACKAGE', tarname)
    config.define_tool('VERSION', version)


#
#  programs
#

def ac_path_prog(config, variable, program, default_program):
    if not config.check_tool(variable, program, lambda path: True):
        config.define_tool(variable, default_program)
    return config.get_tool(variable)


def ac_prog_shell(config):
    return (config.check_tool('SHELL', 'sh')
            or config.check_tool('SHELL', 'ksh')
            or config.check_tool('SHELL', 'bash'))


def ac_prog_egrep(config):
    if config.execute_command(FORMAT_RUN_SH, "echo a | grep -E '(a|b)'"):
        config.define_tool('EGREP', 'grep -E')
        config.report_string('egrep', 'grep -E')
    elif config.execute_command(FORMAT_RUN_SH, "echo a | egrep '(a|b)'"):
        config.define_tool('EGREP', 'egrep')
        config.report_string('egrep', 'egrep')
    return config.get_tool('EGREP')


def ac_prog_ranlib(config):
    if not config.check_tool('RANLIB', 'ranlib'):
        config.define_tool('RANLIB', ':')
    return config.get_tool('RANLIB')


def ac_prog_awk(config):
    return (config.check_tool('AWK', 'gawk')
            or config.check_tool('AWK', 'mawk')
            or config.check_tool('AWK', 'nawk')
            or config.check_tool('AWK', 'awk'))


def ac_prog_install(config):

    def usable(tool):
        # known broken install programs
        if config.equal(config.kernel(), 'aix') and config.equal(tool, '/bin/install'):
            return False
        return True

    if not config.check_tool('INSTALL', 'install', usable):
        config.define_tool('INSTALL', './install-sh')
    config.define_tool('INSTALL', '@INSTALL@ -c')
    config.define_tool('INSTALL_PROGRAM', '${INSTALL}')
    config.define_tool('INSTALL_SCRIPT', '${INSTALL}')
    config.define_tool('INSTALL_DATA', '${INSTALL} -m 644')
    return config.get_tool('INSTALL')


def ac_prog_ln_s(config):
    workdir = config.executor.workdir
    from_file = 'cdetmpa.txt'
    to_file = 'cdetmpb.txt'

    def links(tool):
        from_path = os.path.join(workdir, from_file)
        to_path = os.path.join(workdir, to_file)
        config.create_file(from_path, '')
        try:
            return (config.execute_command('%s %s %s', tool, from_file, to_file)
                    and os.path.exists(to_path))
        finally:
            config.remove_file(to_path)
            config.remove_file(from_path)

    return (config.check_tool('LN_S', 'ln -s', links)
            or config.check_tool('LN_S', 'ln', links)
            or config.check_tool('LN_S', 'cp -p', links))


#
#  headers
#

def ac_header_stdc(config):
    success = config.compile_source(
        '#include <stdlib.h>\n#include <stdarg.h>\n#include <string.h>\n'
        '#include <float.h>\nint main(void) { return 0; }\n')
    config.report_bool('ANSI C headers', success)
    if success:
        config.add_macro('STDC_HEADERS', '1')
    return success


def ac_header_time(config):
    if config.check_header_depend('time.h', 'sys/time.h'):
        config.add_macro('TIME_WITH_SYS_TIME', '1')
        return True
    config.check_header('sys/time.h')
    config.check_header('time.h')
    return False


def ac_header_stdbool(config):
    return (config.check_type('_Bool', 'stdbool.h')
            or config.check_type('_Bool'))


def ac_header_resolv(config):
    return config.check_header_depend('resolv.h',
                                      'sys/types.h,netinet/in.h,arpa/nameser.h')


def ac_header_dirent(config):
    return (config.check_header('dirent.h')
            or config.check_header('sys/ndir.h')
            or config.check_header('sys/dir.h')
            or config.check_header('ndir.h'))


def ac_header_stat(config):
    if not config.check_header('sys/stat.h'):
        return False
    checks = ''.join(
        '#if defined({0}) && defined({1})\n#if {0}({1})\nFailure\n#endif\n#endif\n'
        .format(macro, mode)
        for macro, mode in [('S_ISBLK', 'S_IFDIR'), ('S_ISBLK', 'S_IFCHR'),
                            ('S_ISLNK', 'S_IFREG'), ('S_ISSOCK', 'S_IFREG')])
    success = config.compile_source(
        '#include <sys/types.h>\n#include <sys/stat.h>\n' + checks +
        'int main(void) { return 0; }\n')
    config.report_bool('broken <sys/stat.h>', not success)
    if not success:
        config.add_macro('STAT_MACROS_BROKEN', '1')
    return success


def ac_header_mmap_anonymous(config):
    success = config.compile_source(
        '#include <sys/mman.h>\n#include <unistd.h>\n#include <fcntl.h>\n'
        'int main(void) { mmap(0, 1, PROT_READ, MAP_ANONYMOUS, -1, 0); return 0; }\n')
    config.report_bool('MMAP_ANONYMOUS', success)
    if success:
        config.define_header('mmap.h')
        config.define_func('mmap')
        config.add_macro('HAVE_MMAP_ANONYMOUS', '1')
    return success


def ac_header_sys_wait(config):
    success = config.compile_source(
        '#include <sys/types.h>\n#include <sys/wait.h>\n'
        '#ifndef WEXITSTATUS\n#define WEXITSTATUS(x) ((unsigned int)(x) >> 8)\n#endif\n'
        '#ifndef WIFEXITED\n#define WIFEXITED(x) (((x) & 0xFF) == 0)\n#endif\n'
        'int main(void) { int s; wait(&s); return WIFEXITED(s) ? WEXITSTATUS(s) : 1; }\n')
    config.report_bool('<sys/wait.h> that is POSIX.1 compatible', success)
    if success:
        config.define_header('sys/wait.h')
    return success


#
#  types
#

def _check_type_in(config, type_name, headers):
    for header in headers:
        if config.check_type(type_name, header):
            return True
    return config.check_type(type_name)


def ac_type_pid_t(config):
    found = _check_type_in(config, 'pid_t', ['stddef.h', 'sys/types.h', 'unistd.h',
                                             'sys/wait.h', 'fcntl.h', 'signal.h'])
    if not found:
        config.add_macro('pid_t', 'int')
    return found


def ac_type_uid_t(config):
    return _check_type_in(config, 'uid_t', ['sys/types.h', 'unistd.h'])


def ac_type_off_t(config):
    found = _check_type_in(config, 'off_t', ['sys/types.h', 'unistd.h'])
    if not found:
        config.add_macro('off_t', 'long')
    return found


def ac_type_size_t(config):
    found = _check_type_in(config, 'size_t', ['stddef.h', 'sys/types.h', 'unistd.h'])
    if not found:
        config.add_macro('size_t', 'unsigned')
    return found


#
#  functions
#

ALLOCA_SOURCES = {
    'gcc': 'int main(void) {char *p = __builtin_alloca(1); return (p) ? 0 : 1; }\n',
    'msc': '#include <malloc.h>\n'
           'int main(void) { char *p = _alloca(1); return (p) ? 0 : 1; }\n',
    'xlc': '#pragma alloca\n'
           'int main(void) { char *p = alloca(1); return (p) ? 0 : 1; }\n',
}
ALLOCA_SOURCE = ('#ifndef alloca\nchar *alloca();\n#endif\n'
                 'int main(void) { char *p = alloca(1); return (p) ? 0 : 1; }\n')


def ac_func_alloca(config):
    # TODO: check for a working alloca.h before the compiler specific forms
    source = ALLOCA_SOURCE
    compiler = config.compiler()
    for name, candidate in ALLOCA_SOURCES.items():
        if config.equal(compiler, name):
            source = candidate
            break
    success = config.compile_source(source)
    config.report_bool('alloca', success)
    if success:
        config.define_func('alloca')
    return success


def ac_func_rand48(config):
    success = config.compile_source(
        '#include <stdlib.h>\n'
        'int main(void) { srand48(0); lrand48(); drand48(); return 0; }\n')
    config.report_bool('rand48 functions', success)
    if success:
        config.define_func('rand48')
    return success


#
#  language
#

INLINE_SOURCE = '%s int foo(void) { return 1; }\nint main(void) { int i = foo(); return 0; }\n'


def ac_c_inline(config):
    success = False
    for keyword in ['inline', '__inline__', '__inline']:
        success = config.compile_source(INLINE_SOURCE % keyword)
        if success:
            if keyword != 'inline':
                config.add_macro('inline', keyword)
            break
    else:
        config.add_macro('inline', '')
    config.report_bool('inline', success)
    return success


def ac_c_bigendian(config):
    success = config.execute_source(
        'int main(void) { unsigned int i = 1; '
        'return (*((unsigned char *)&i) == 0) ? 0 : 1; }\n', '', None)
    config.report_bool('big endian', success)
    return success


def ac_c_printf_a(config):
    success = config.compile_source(
        '#include <stdlib.h>\n#include <stdio.h>\n'
        'int main(void) { volatile double alpha = 1.0/10.0; volatile double bravo; '
        'char buffer[100]; sprintf(buffer, "%a", alpha); bravo = atof(buffer); '
        'if (alpha != bravo) return 1; if (alpha != 0x1.999999999999ap-4) return 1; '
        'return 0; }\n')
    config.report_bool('printf with %a format specifier', success)
    if success:
        config.define_func('printf_a')
    return success


def ac_standard(config):
    """The recipe set run by 'python -m cdetect'"""
    ac_prefix(config)
    ac_prog_shell(config)
    ac_prog_egrep(config)
    ac_prog_awk(config)
    ac_prog_ranlib(config)
    ac_prog_install(config)
    ac_header_stdc(config)
    ac_header_time(config)
    ac_header_stdbool(config)
    ac_header_dirent(config)
    ac_header_sys_wait(config)
    ac_type_pid_t(config)
    ac_type_size_t(config)
    ac_type_off_t(config)
    ac_type_uid_t(config)
    ac_func_alloca(config)
    ac_func_rand48(config)
    ac_c_inline(config)
    if ac_c_bigendian(config):
        config.add_macro('WORDS_BIGENDIAN', '1')
