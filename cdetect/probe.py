#
#  Probe execution: write a snippet, compile it, maybe run it, classify.
#

import os
import sys
import shutil
import logging
import tempfile
import itertools
import contextlib
import subprocess
import collections

from cdetect.dstring import DynamicString
from cdetect.errors import ProbeInterrupted
from cdetect import formatter
from cdetect.tools import tool_exists

log = logging.getLogger(__name__)

# <compiler> <global cflags> <local cflags> <source> -o <target> <ldflags>
FORMAT_COMPILE = '%s %s %s %s -o %s %s'
FORMAT_COMPILE_MSVC = '"%s" /nologo %s %s %s /Fe%s %s'
FORMAT_LIBRARY = '-l%s'
FORMAT_LIBRARY_MSVC = '/DEFAULTLIB:%s'

# shell specific
FORMAT_EXECUTE = '%s >%s 2>&1'
FORMAT_REMOTE = '%s %s >%s 2>&1'

# a POSIX shell forks for a redirected command and reports a signal as 128+n
EXEC_PREFIX = 'exec ' if os.name == 'posix' else ''

FILE_BASE = 'cdetmp'
FILE_REDIRECTION = 'cdetmp.txt'

# compilers that take C++ sources
CXX_COMPILERS = ('g++', 'c++', 'clang++', 'aCC', 'CC')

ProbeResult = collections.namedtuple('ProbeResult', ['success', 'output'])


class UniqueNames(object):
    """Temporary file names built from the process id and a counter"""

    def __init__(self, base=FILE_BASE, pid=None):
        self.base = base
        self.pid = os.getpid() if pid is None else pid
        self._counter = itertools.count()

    def next(self, suffix=''):
        return '{}{:x}_{:x}{}'.format(self.base, self.pid, next(self._counter), suffix)


class Toolchain(object):
    """Compiler command, global flags, remote runner and the search path.

    The compiler can be swapped temporarily with override(), which
    restores the previous settings when the block is left.
    """

    def __init__(self, compiler=None, cflags='', remote=None, path=None):
        self.compiler = compiler
        self.cflags = cflags
        self.remote = remote
        if path is None:
            path = os.environ.get('PATH', '')
        if isinstance(path, str):
            path = [p for p in path.split(os.pathsep) if p]
        self.path = path

    @property
    def compiler_name(self):
        if not self.compiler:
            return None
        first = self.compiler.strip().split(' ')[0].strip('"')
        name = os.path.basename(first)
        if name.lower().endswith('.exe'):
            name = name[:-4]
        return name

    @property
    def is_msvc(self):
        return (self.compiler_name or '').lower() == 'cl'

    @property
    def is_cxx(self):
        return self.compiler_name in CXX_COMPILERS

    @property
    def compile_format(self):
        return FORMAT_COMPILE_MSVC if self.is_msvc else FORMAT_COMPILE

    @property
    def library_format(self):
        return FORMAT_LIBRARY_MSVC if self.is_msvc else FORMAT_LIBRARY

    @property
    def source_suffix(self):
        return '.cpp' if self.is_cxx else '.c'

    @property
    def execute_suffix(self):
        return '.exe' if sys.platform in ('win32', 'cygwin') else ''

    @contextlib.contextmanager
    def override(self, **settings):
        saved = {}
        for name, value in settings.items():
            if not hasattr(self, name):
                raise AttributeError('unknown toolchain setting {!r}'.format(name))
            saved[name] = getattr(self, name)
            setattr(self, name, value)
        try:
            yield self
        finally:
            for name, value in saved.items():
                setattr(self, name, value)


def run_shell(command, cwd=None):
    """Default runner: hand the command to the shell, return the exit code"""
    return subprocess.run(command, shell=True, cwd=cwd).returncode


class ProbeExecutor(object):
    """Run snippets through the toolchain inside a work directory"""

    def __init__(self, toolchain, workdir=None, names=None, runner=None,
                 debug=False):
        self.toolchain = toolchain
        self.debug = debug
        self.names = names or UniqueNames()
        self.runner = runner or run_shell

        # private scratch area unless told otherwise
        self._own_workdir = workdir is None
        if workdir is None:
            workdir = tempfile.mkdtemp(prefix=FILE_BASE + '_')
        else:
            os.makedirs(workdir, exist_ok=True)
        self.workdir = workdir

    def close(self):
        if self._own_workdir and not self.debug and os.path.isdir(self.workdir):
            shutil.rmtree(self.workdir)

    def _path(self, name):
        return os.path.join(self.workdir, name)

    def remove(self, name):
        path = self._path(name)
        if os.path.exists(path):
            os.remove(path)

    def system(self, command):
        """Run one shell command, True when it exited with status 0"""
        log.debug('running: %s', command)
        try:
            status = self.runner(command, cwd=self.workdir)
        except OSError as os_err:
            log.debug('cannot launch %r: %s', command, os_err)
            return False

        # the operator interrupted us; stop everything
        if status < 0:
            raise ProbeInterrupted(command, -status)
        return status == 0

    def execute(self, command, remote=False, single=False):
        """Run a command, capturing stdout and stderr.

        Args:
            command: the shell command
            remote: run it through the toolchain's remote runner
            single: the command is one program, the shell execs it so a
                signal that kills the program is seen here

        Returns:
            ProbeResult(success, output) where output is a DynamicString.
        """
        command = str(command)
        output = DynamicString()

        if remote and not tool_exists(self.toolchain.remote):
            log.debug('execute(%r) failed', command)
            log.debug('remote execution not possible')
            return ProbeResult(False, output)

        prefix = EXEC_PREFIX if single else ''
        redirection = self.names.next('.txt')
        if remote:
            full = formatter.format(FORMAT_REMOTE, prefix + self.toolchain.remote,
                                    command, redirection)
        else:
            full = formatter.format(FORMAT_EXECUTE, prefix + command, redirection)

        try:
            success = self.system(full.content)
            path = self._path(redirection)
            if os.path.exists(path):
                with open(path, 'r', errors='replace') as rf:
                    output.append(rf.read())
        finally:
            self.remove(redirection)

        if not success:
            log.debug('process error: %s', command)
            for line in output.content.splitlines():
                log.debug('| %s', line)
        return ProbeResult(success, output)

    def compile_file(self, source_file, execute_file, cflags='', ldflags='',
                     arguments=None, execute=False, remote=False):
        """Compile a source file and optionally run the program"""

        # no compiler known yet
        if not self.toolchain.compiler:
            return ProbeResult(False, DynamicString())

        self.remove(execute_file)

        compile_command = formatter.format(self.toolchain.compile_format,
                                           self.toolchain.compiler,
                                           self.toolchain.cflags or '',
                                           cflags or '',
                                           source_file,
                                           execute_file,
                                           ldflags or '')
        result = self.execute(compile_command, single=True)

        if result.success and execute:
            program = os.path.join('.', execute_file)
            if arguments:
                command = formatter.format('%s %s', program, arguments)
            else:
                command = formatter.format('%s', program)
            result = self.execute(command, remote=remote, single=True)

        return result

    def compile_source(self, source, cflags='', ldflags='', arguments=None,
                       execute=False, remote=False, name=None):
        """Write 'source' to a temp file, compile and optionally run it"""
        base = name or self.names.next()
        source_file = base + self.toolchain.source_suffix
        execute_file = base + self.toolchain.execute_suffix

        # log it
        source = str(source)
        for line in source.splitlines():
            log.debug('| %s', line)

        try:
            try:
                with open(self._path(source_file), 'w') as sf:
                    sf.write(source)
            except OSError as os_err:
                log.debug('cannot write file %r: %s', source_file, os_err)
                return ProbeResult(False, DynamicString())

            return self.compile_file(source_file, execute_file, cflags, ldflags,
                                     arguments, execute, remote)
        finally:
            self.remove(execute_file)
            self.remove(source_file)
