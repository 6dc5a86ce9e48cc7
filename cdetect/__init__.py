"""
 Compiler-only feature detection.

 Probe a C toolchain for headers, types, functions and libraries by
 compiling small snippets, then persist the results as a config.h,
 a cache file and substituted template files.

"""

VERSION_INFO = [ 0, 3, 0 ]

def version():
    """Return the version number of this module.

    Args:
        None

    Returns:
        String containing the major, minor, micro version number.

    """
    return '{}.{}.{}'.format(VERSION_INFO[0], VERSION_INFO[1], VERSION_INFO[2])

def version_number(major, minor, patch):
    """Pack a version triple the way the host fingerprint reports it.

    Args:
        major: major number (8 bits)
        minor: minor number (8 bits)
        patch: patch number (16 bits)

    Returns:
        Integer suitable for comparing with Session.compiler_version() and
        friends.

    """
    return ((major & 0xFF) << 24) | ((minor & 0xFF) << 16) | (patch & 0xFFFF)


from cdetect.errors import ConfigureError, UsageError, ProbeInterrupted
from cdetect.session import Session
