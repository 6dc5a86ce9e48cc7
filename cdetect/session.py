#
#  A detection session: everything one configure run needs, in one object
#
#  Typical use:
#
#    with Session() as config:
#        config.register_option('with-foo', None, '', None, 'Use foo')
#        if config.options(sys.argv):
#            config.check_header('stdio.h')
#            config.check_func('strdup')
#
#  Leaving the block normally writes cachect.txt, config.h and every
#  registered template.  An exception skips the outputs and only releases
#  the work directory.
#

import os
import sys
import logging

from cdetect import version
from cdetect.cache import CacheFile
from cdetect.errors import ConfigureError
from cdetect.formatter import vformat
from cdetect.header import ConfigHeader
from cdetect.host import HOST_SOURCE, HostInfo
from cdetect.options import CONTINUE, ExitWithCode, OptionParser
from cdetect.ordmap import OrderedMap, Ownership
from cdetect.pattern import match as wildcard_match
from cdetect.probe import ProbeExecutor, Toolchain
from cdetect.registry import (Detector, Registries, Report, SOURCE_EMPTY,
                              report_message)
from cdetect.substitute import substitute, substitute_file
from cdetect.tools import ToolMap

log = logging.getLogger(__name__)

# candidates tried when the given compiler (if any) does not work
C_COMPILERS = ('cl', 'gcc', 'icc', 'xlC_r', 'xlC', 'cc', 'c89')

SOURCE_CROSS = 'int main(void) { return 0; }\n'


def equal(first, second):
    """Case-insensitive comparison where None only equals None"""
    if first is second:
        return True
    if first is None or second is None:
        return False
    return first.upper() == second.upper()


class Session(object):
    """State of one detection run.

    Args:
        nested: the session runs inside another one; it registers no
                built-in options and never writes its output files
        environ: environment to read PATH, CC and CFLAGS from
        runner: command runner handed to the probe executor
        stream: where the user-facing lines go (default sys.stdout)
    """

    def __init__(self, nested=False, environ=None, runner=None, stream=None):
        self.nested = nested
        self.environ = os.environ if environ is None else environ
        self.stream = stream

        self.is_silent = False
        self.is_verbose = False
        self.is_dryrun = False
        self.is_usage = False
        self.exit_code = None

        self.parser = OptionParser()
        self.toolchain = Toolchain(path='')
        self.registries = Registries()
        self.tools = ToolMap()
        self.header = ConfigHeader('config.h')
        self.cache = CacheFile('cachect.txt')
        self.builds = OrderedMap(Ownership.COPY)
        self.copyright = None

        self.host = None
        self.host_source = None
        self._host_probed = False

        self._runner = runner
        self._workdir = None
        self._executor = None
        self._detector = None
        self._cflags_given = False
        self._log_handler = None

        self.begin()

    #
    #  lifecycle
    #

    def begin(self):
        if not self.nested:
            register = self.parser.register
            self.parser.register_group('General')
            register('help', 'h', None, None, 'Output this help text',
                     self._option_help)
            register('version', 'V', None, None, 'Output pycdetect version',
                     self._option_version)
            register('quiet', 'q', None, None, 'Do not output to stdout',
                     self._option_quiet)
            register('verbose', None, None, None, 'Output debugging information',
                     self._option_verbose)
            register('no-create', 'n', None, None,
                     'No output files are created (dry run)', self._option_dryrun)
            register('refresh', None, None, None, 'Refresh cache',
                     self._option_refresh)
            register('compiler', 'c', '', None, 'Use argument as compiler',
                     self._option_compiler)
            register('cflags', None, '', None, 'Use argument as compile-time flags',
                     self._option_cflags)
            register('remote', None, '', None, 'Redirect execution to <argument>',
                     self._option_remote)

    def options(self, argv):
        """Parse the command line, then initialize and load the cache.

        Returns:
            True when the detection should proceed.
        """
        result = self.parser.parse(argv)
        if isinstance(result, ExitWithCode):
            self.exit_code = result.code
            return False

        if not self.initialize():
            self.exit_code = 1
            return False

        self.cache.load(self.registries)
        return True

    def initialize(self):
        self.output('pycdetect {}'.format(version()))

        self.toolchain.path = [p for p in
                               self.environ.get('PATH', '').split(os.pathsep) if p]

        if not self.toolchain.compiler:
            self.toolchain.compiler = self.environ.get('CC') or None

        if not self._cflags_given:
            self.toolchain.cflags = self.environ.get('CFLAGS', '')
            self.define_tool_format('CFLAGS', '@CFLAGS=@ %s', self.toolchain.cflags)

        log.debug('CC = %r', self.toolchain.compiler or '')
        log.debug('CFLAGS = %r', self.toolchain.cflags)

        if not self._check_compilation('C', 'CC', C_COMPILERS):
            return False

        if not self._check_cross_compilation():
            self.toolchain.remote = None

        return True

    def end(self):
        """Write the outputs (unless told not to) and release everything"""
        if self.tools.get('CFLAGS') is None:
            self.tools.define('CFLAGS', '')

        try:
            if not (self.is_usage or self.nested or self.is_dryrun
                    or self.exit_code == 0):
                self.save_files()
        finally:
            self.close()

    def save_files(self):
        self.cache.save(self.registries)
        if self.header.path:
            self.output('creating {}'.format(self.header.path))
            self.header.write(self.registries, self.host)
        for source, target in self.builds.items():
            substitute_file(source, target, self.tools, report=self.output)

    def close(self):
        """Release the work directory and the verbose log handler"""
        if self._executor is not None:
            self._executor.close()
            self._executor = None
            self._detector = None
        if self._log_handler is not None:
            logging.getLogger('cdetect').removeHandler(self._log_handler)
            self._log_handler = None

    teardown = close

    def abort(self, message='Aborting'):
        raise ConfigureError(message)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        if exc_type is None:
            self.end()
        else:
            self.teardown()
        return False

    #
    #  built-in option handlers
    #

    def _option_help(self, name, argument):
        self.is_usage = True
        self.output(self.parser.usage().rstrip('\n'))
        return ExitWithCode(0)

    def _option_version(self, name, argument):
        self.output('pycdetect {}'.format(version()))
        if self.copyright:
            self.output(self.copyright)
        return ExitWithCode(0)

    def _option_quiet(self, name, argument):
        self.is_silent = True
        return CONTINUE

    def _option_verbose(self, name, argument):
        self.is_verbose = True
        if self._log_handler is None:
            self._log_handler = logging.StreamHandler(sys.stderr)
            self._log_handler.setFormatter(
                logging.Formatter('%(name)s: %(message)s'))
            logger = logging.getLogger('cdetect')
            logger.addHandler(self._log_handler)
            logger.setLevel(logging.DEBUG)
        return CONTINUE

    def _option_dryrun(self, name, argument):
        self.is_dryrun = True
        return CONTINUE

    def _option_refresh(self, name, argument):
        self.cache.remove()
        return CONTINUE

    def _option_compiler(self, name, argument):
        self.toolchain.compiler = argument
        return CONTINUE

    def _option_cflags(self, name, argument):
        self._cflags_given = True
        self.toolchain.cflags = argument or ''
        self.define_tool_format('CFLAGS', '@CFLAGS=@ %s', self.toolchain.cflags)
        return CONTINUE

    def _option_remote(self, name, argument):
        self.toolchain.remote = argument or None
        return CONTINUE

    #
    #  output
    #

    def output(self, text):
        if not self.is_silent:
            print(text, file=self.stream or sys.stdout)

    def report(self, fmt, *args):
        """Print a formatted line, even in silent mode"""
        print(vformat(fmt, args).content, file=self.stream or sys.stdout)
        return True

    def _report_check(self, message, report):
        self.output(report_message(str(message), report))

    def report_bool(self, message, found):
        self._report_check(message, Report.FOUND if found else Report.NONE)

    def report_string(self, message, value):
        self.output('checking for {}... {}'.format(message, value))

    #
    #  probe machinery
    #

    @property
    def executor(self):
        if self._executor is None:
            self._executor = ProbeExecutor(self.toolchain, workdir=self._workdir,
                                           runner=self._runner)
        return self._executor

    @property
    def detector(self):
        if self._detector is None:
            self._detector = Detector(self.registries, self.executor,
                                      self._report_check)
        return self._detector

    def _compiler_works(self, command):
        with self.toolchain.override(compiler=command):
            return self.executor.compile_source(SOURCE_EMPTY, execute=True).success

    def _check_compilation_single(self, variable, command):
        compiler = command + self.toolchain.execute_suffix
        result = self.tools.check_with_path(variable, compiler, self._compiler_works)
        if result is None:
            result = self.tools.check(variable, compiler, self.toolchain.path,
                                      self._compiler_works)
        return result

    def _check_compilation(self, kind, variable, candidates):
        log.debug('checking compilation (%s)', kind)
        command = None
        if self.toolchain.compiler:
            command = self._check_compilation_single(variable, self.toolchain.compiler)
        if command is None:
            for candidate in candidates:
                command = self._check_compilation_single(variable, candidate)
                if command is not None:
                    break

        if command is None:
            self.output('checking for working {} compiler... none'.format(kind))
            if self.toolchain.compiler:
                self.output("The '{}' compiler does not work.".format(
                    self.toolchain.compiler))
            self.output('Please run again with the --compiler option.')
            return False

        self.toolchain.compiler = command
        self.output('checking for working {} compiler... {}'.format(kind, command))
        return True

    def _check_cross_compilation(self):
        if not self.toolchain.remote:
            return False
        log.debug('checking cross compilation with %r', self.toolchain.remote)
        success = self.execute_source(SOURCE_CROSS, '', '')
        self.report_bool('cross-compilation', success)
        return success

    def compile_source(self, source, cflags=''):
        log.debug('compile_source(cflags=%r)', cflags)
        return self.executor.compile_source(source, cflags or '').success

    def execute_source(self, source, cflags='', arguments=None):
        log.debug('execute_source(cflags=%r, arguments=%r)', cflags, arguments)
        result = self.executor.compile_source(source, cflags or '', '',
                                              arguments, execute=True,
                                              remote=bool(self.toolchain.remote))
        return result.success

    def compile_file(self, filename, cflags=''):
        log.debug('compile_file(filename=%r, cflags=%r)', filename, cflags)
        execute_file = self.executor.names.next(self.toolchain.execute_suffix)
        try:
            result = self.executor.compile_file(os.path.abspath(filename),
                                                execute_file, cflags or '')
        finally:
            self.executor.remove(execute_file)
        return result.success

    def execute_command(self, fmt, *args):
        """Format, substitute @VARIABLES@ and run a shell command"""
        log.debug('execute_command(%r)', fmt)
        command, unresolved = substitute(vformat(fmt, args), self.tools)
        return self.executor.execute(command).success

    #
    #  files
    #

    def create_file(self, filename, text):
        with open(filename, 'w') as fd:
            fd.write(text)
        return True

    def remove_file(self, filename):
        if os.path.exists(filename):
            os.remove(filename)
            return True
        return False

    def file_exists_format(self, fmt, *args):
        return os.path.exists(vformat(fmt, args).content)

    #
    #  checks
    #

    def check_header(self, header):
        return self.detector.check_header(header).found

    def check_header_depend(self, header, depends):
        return self.detector.check_header(header, depends).found

    def check_type(self, type_name, header=None):
        return self.detector.check_type(type_name, header).found

    def check_func(self, function, library=None):
        return self.detector.check_function(function, library).found

    def check_lib(self, library, function=None):
        return self.detector.check_library(library, function).found

    def define_header(self, header, found=True):
        self.registries.header.define(header, None, found)

    def define_type(self, type_name, header=None, found=True):
        self.registries.type.define(type_name, header, found)

    def define_func(self, function, library=None, found=True):
        self.registries.function.define(function, library, found)
        if library:
            self.detector._note_library(library, found)

    def define_lib(self, library, found=True):
        self.registries.library.define(library, None, found)

    #
    #  macros
    #

    def add_macro(self, macro, value):
        self.header.define(macro, value)
        return True

    def add_macro_format(self, macro, fmt, *args):
        self.header.define(macro, vformat(fmt, args).content)
        return True

    #
    #  tools
    #

    def define_tool(self, tool, value):
        self.tools.define(tool, value)
        return True

    def define_tool_bool(self, tool, flag):
        self.tools.define_bool(tool, flag)
        return True

    def define_tool_format(self, tool, fmt, *args):
        self.tools.define(tool, vformat(fmt, args).content)
        return True

    def define_tool_command(self, tool, fmt, *args):
        return self.tools.define_command(tool, vformat(fmt, args),
                                         self.executor) is not None

    def get_tool(self, tool):
        return self.tools.get(tool)

    def check_tool(self, variable, tool, filter=None):
        """Look for 'tool' along PATH and report it.

        Returns:
            The value 'variable' ends up with, or None.
        """
        log.debug('check_tool(variable=%r, tool=%r)', variable, tool)
        result = self.tools.check(variable, tool, self.toolchain.path, filter)
        self.report_string('tool {}'.format(tool), result or 'no')
        return result

    #
    #  options
    #

    def register_option_group(self, title):
        return self.parser.register_group(title)

    def register_option(self, long_name, short_name=None, default_value=None,
                        default_argument=None, help=None):
        self.parser.register(long_name, short_name, default_value,
                             default_argument, help)
        return True

    def get_option(self, long_name):
        return self.parser.get(long_name)

    def set_option(self, long_name, value):
        if value is None:
            return False
        return self.parser.set(long_name, value)

    #
    #  registrations
    #

    def register_build(self, source, target):
        if not (source and target):
            return False
        self.builds.set(source, target)
        return True

    def register_cache(self, path):
        self.cache = CacheFile(path)
        return True

    def register_header(self, path):
        """Name of the generated header; None disables it"""
        self.header.path = path
        return True

    def register_header_format(self, fmt):
        self.registries.header.macro_format = fmt
        return True

    def register_type_format(self, fmt):
        self.registries.type.macro_format = fmt
        return True

    def register_function_format(self, fmt):
        self.registries.function.macro_format = fmt
        return True

    def register_library_format(self, fmt):
        self.registries.library.macro_format = fmt
        return True

    def register_work_directory(self, path):
        if self._executor is not None:
            raise ConfigureError('work directory must be registered before probing')
        self._workdir = path
        return True

    def register_copyright(self, notice):
        self.copyright = notice
        return True

    def register_host_source(self, path):
        """Use the fingerprint program in 'path' instead of the built-in one"""
        self.host_source = path
        return True

    #
    #  comparisons
    #

    equal = staticmethod(equal)

    @staticmethod
    def match(string, pattern):
        return wildcard_match(string, pattern)

    #
    #  host
    #

    def _probe_host(self):
        if self._host_probed:
            return self.host is not None
        self._host_probed = True

        remote = bool(self.toolchain.remote)
        if self.host_source:
            self.output('compiling {}...'.format(self.host_source))
            execute_file = self.executor.names.next('b' + self.toolchain.execute_suffix)
            try:
                result = self.executor.compile_file(
                    os.path.abspath(self.host_source), execute_file,
                    execute=True, remote=remote)
            finally:
                self.executor.remove(execute_file)
        else:
            self.output('compiling host fingerprint...')
            result = self.executor.compile_source(HOST_SOURCE, execute=True,
                                                  remote=remote)

        if result.success:
            self.host = HostInfo.parse(result.output)
        return result.success

    def _host_name(self, part):
        if not self._probe_host() or self.host is None:
            return None
        return self.host.name(part)

    def _host_version(self, part):
        if not self._probe_host() or self.host is None:
            return 0
        return self.host.version(part)

    def _host_check(self, part):
        log.debug('%s_check()', part)
        if not self._probe_host():
            return False
        if self.host is None:
            self.output('checking {}... Unknown'.format(part))
            return False
        self.output('checking {}... {}'.format(part, self.host.describe(part)))
        self.host.checked.add(part)
        return self.host.name(part) is not None

    def compiler(self):
        return self._host_name('compiler')

    def compiler_version(self):
        return self._host_version('compiler')

    def compiler_check(self, pattern=None):
        """Report the compiler; with a pattern, also wildcard match its name"""
        found = self._host_check('compiler')
        if pattern is None:
            return found
        return found and self.match(self.compiler(), pattern)

    def kernel(self):
        return self._host_name('kernel')

    def kernel_version(self):
        return self._host_version('kernel')

    def kernel_check(self, pattern=None):
        found = self._host_check('kernel')
        if pattern is None:
            return found
        return found and self.match(self.kernel(), pattern)

    def cpu(self):
        return self._host_name('cpu')

    def cpu_version(self):
        return self._host_version('cpu')

    def cpu_check(self, pattern=None):
        found = self._host_check('cpu')
        if pattern is None:
            return found
        return found and self.match(self.cpu(), pattern)

    #
    #  config.log
    #

    def generate_config_log(self, config_log):
        """Write an autoconf flavoured summary of the run"""

        with open(config_log, 'w') as fd:
            fd.write('## ---------------- ##\n')
            fd.write('## Cache variables. ##\n')
            fd.write('## ---------------- ##\n')
            fd.write('\n')

            for registry in self.registries:
                for key, value in registry.items():
                    fd.write('{}:{}={}\n'.format(registry.tag, key, value))

            fd.write('\n')
            fd.write('## ----------------- ##\n')
            fd.write('## Output variables. ##\n')
            fd.write('## ----------------- ##\n')
            fd.write('\n')

            for name, value in self.tools.items():
                fd.write("{}='{}'\n".format(name, value))

            fd.write('\n')
            fd.write('## ----------- ##\n')
            fd.write('## confdefs.h. ##\n')
            fd.write('## ----------- ##\n')
            fd.write('\n')

            for line in self.header.lines(self.registries, self.host):
                if line.startswith('#define') and 'INCLUDE_GUARD' not in line:
                    fd.write(line + '\n')
