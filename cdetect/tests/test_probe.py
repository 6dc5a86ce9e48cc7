"""
Unit testing for parts of the probe module.
"""

import os
import stat
import signal
import shutil
import tempfile
import unittest

from cdetect.errors import ProbeInterrupted
from cdetect.probe import (EXEC_PREFIX, ProbeExecutor, Toolchain, UniqueNames,
                           run_shell)
from cdetect.tests.support.fakes import FakeRunner


class Names(unittest.TestCase):

    def test_001_pid_and_counter(self):
        names = UniqueNames(pid=0x1f)
        self.assertEqual(names.next(), 'cdetmp1f_0')
        self.assertEqual(names.next('.c'), 'cdetmp1f_1.c')
        self.assertEqual(names.next('.txt'), 'cdetmp1f_2.txt')

    def test_002_default_pid(self):
        names = UniqueNames()
        self.assertEqual(names.next(), 'cdetmp{:x}_0'.format(os.getpid()))


class Toolchains(unittest.TestCase):

    def test_001_compiler_name(self):
        self.assertEqual(Toolchain('/usr/bin/gcc -m32', path='').compiler_name, 'gcc')
        self.assertEqual(Toolchain('"C:/VC/bin/cl.exe"', path='').compiler_name, 'cl')
        self.assertIsNone(Toolchain(path='').compiler_name)

    def test_002_msvc_formats(self):
        toolchain = Toolchain('cl', path='')
        self.assertTrue(toolchain.is_msvc)
        self.assertEqual(toolchain.library_format, '/DEFAULTLIB:%s')
        self.assertIn('/Fe', toolchain.compile_format)

    def test_003_cxx_sources(self):
        self.assertEqual(Toolchain('g++', path='').source_suffix, '.cpp')
        self.assertEqual(Toolchain('gcc', path='').source_suffix, '.c')

    def test_004_override_restores(self):
        toolchain = Toolchain('cc', cflags='-O2', path='')
        with toolchain.override(compiler='gcc', cflags=''):
            self.assertEqual(toolchain.compiler, 'gcc')
            self.assertEqual(toolchain.cflags, '')
        self.assertEqual(toolchain.compiler, 'cc')
        self.assertEqual(toolchain.cflags, '-O2')

    def test_005_override_restores_on_error(self):
        toolchain = Toolchain('cc', path='')
        with self.assertRaises(RuntimeError):
            with toolchain.override(compiler='gcc'):
                raise RuntimeError('boom')
        self.assertEqual(toolchain.compiler, 'cc')

    def test_006_override_unknown_setting(self):
        with self.assertRaises(AttributeError):
            with Toolchain(path='').override(linker='ld'):
                pass

    def test_007_path_split(self):
        toolchain = Toolchain(path=os.pathsep.join(['/a', '', '/b']))
        self.assertEqual(toolchain.path, ['/a', '/b'])


class Executing(unittest.TestCase):

    def setUp(self):
        self.workdir = tempfile.mkdtemp(prefix='cdetect_probe_')

    def tearDown(self):
        shutil.rmtree(self.workdir, ignore_errors=True)

    def executor(self, runner, **settings):
        toolchain = Toolchain(path='', **settings)
        return ProbeExecutor(toolchain, self.workdir, UniqueNames(pid=0x1f),
                             runner)

    @unittest.skipIf(os.name == 'nt', 'executables carry a suffix')
    def test_001_compile_command(self):
        runner = FakeRunner()
        executor = self.executor(runner, compiler='cc', cflags='-O2')
        result = executor.compile_source('int main(void) { return 0;}\n',
                                         '-DX', '-lm')
        self.assertTrue(result.success)
        self.assertEqual(runner.commands,
                         ['exec cc -O2 -DX cdetmp1f_0.c -o cdetmp1f_0 -lm '
                          '>cdetmp1f_1.txt 2>&1'])

    @unittest.skipIf(os.name == 'nt', 'executables carry a suffix')
    def test_002_execute(self):
        runner = FakeRunner(output='hello\n')
        executor = self.executor(runner, compiler='cc')
        result = executor.compile_source('int main(void) { return 0;}\n',
                                         arguments='a b', execute=True)
        self.assertTrue(result.success)
        self.assertEqual(runner.commands[1],
                         'exec ./cdetmp1f_0 a b >cdetmp1f_2.txt 2>&1')
        self.assertEqual(result.output, 'hello\n')

    def test_003_no_compiler(self):
        runner = FakeRunner()
        executor = self.executor(runner)
        result = executor.compile_source('int main(void) { return 0;}\n')
        self.assertFalse(result.success)
        self.assertEqual(runner.commands, [])

    def test_004_failed_compile_does_not_run(self):
        runner = FakeRunner(status=1, output='error: oops\n')
        executor = self.executor(runner, compiler='cc')
        result = executor.compile_source('bad', execute=True)
        self.assertFalse(result.success)
        self.assertEqual(len(runner.commands), 1)
        self.assertEqual(result.output, 'error: oops\n')

    def test_005_scratch_files_removed(self):
        executor = self.executor(FakeRunner(output='x'), compiler='cc')
        executor.compile_source('int main(void) { return 0;}\n', execute=True)
        self.assertEqual(os.listdir(self.workdir), [])

    def test_006_signal_is_fatal(self):
        executor = self.executor(FakeRunner(status=-2), compiler='cc')
        with self.assertRaises(ProbeInterrupted) as ctx:
            executor.compile_source('int main(void) { return 0;}\n')
        self.assertEqual(ctx.exception.signum, 2)
        self.assertIn('signal 2', str(ctx.exception))

    def test_007_launch_failure(self):

        def runner(command, cwd=None):
            raise OSError('no shell')

        executor = self.executor(runner, compiler='cc')
        self.assertFalse(executor.system('true'))

    def test_008_missing_remote(self):
        runner = FakeRunner()
        executor = self.executor(runner, compiler='cc', remote='/nonexistent/ssh-run')
        result = executor.compile_source('int main(void) { return 0;}\n',
                                         execute=True, remote=True)
        self.assertFalse(result.success)
        self.assertEqual(len(runner.compiles()), 1)
        self.assertEqual(len(runner.commands), 1)

    def test_009_remote(self):
        remote = os.path.join(self.workdir, 'run-remote')
        with open(remote, 'w') as rf:
            rf.write('')
        runner = FakeRunner()
        executor = self.executor(runner, compiler='cc', remote=remote)
        result = executor.compile_source('int main(void) { return 0;}\n',
                                         execute=True, remote=True)
        self.assertTrue(result.success)
        self.assertTrue(runner.commands[1].startswith(EXEC_PREFIX + remote + ' ./cdetmp1f_0'))

    def test_010_private_workdir(self):
        executor = ProbeExecutor(Toolchain(path=''), runner=FakeRunner())
        workdir = executor.workdir
        self.assertTrue(os.path.isdir(workdir))
        executor.close()
        self.assertFalse(os.path.exists(workdir))

    def test_011_debug_keeps_workdir(self):
        executor = ProbeExecutor(Toolchain(path=''), runner=FakeRunner(),
                                 debug=True)
        try:
            executor.close()
            self.assertTrue(os.path.isdir(executor.workdir))
        finally:
            shutil.rmtree(executor.workdir, ignore_errors=True)


KILLED_BY_TERM = '#!/bin/sh\nkill -TERM $$\n'

# writes a program that kills itself to the '-o' target
BUILDS_KILLER = """#!/bin/sh
while [ $# -gt 0 ]; do
    if [ "$1" = "-o" ]; then out=$2; fi
    shift
done
printf '#!/bin/sh\\nkill -TERM $$\\n' >"$out"
chmod +x "$out"
"""


@unittest.skipUnless(os.name == 'posix', 'needs a POSIX shell')
class Shell(unittest.TestCase):

    def setUp(self):
        self.workdir = tempfile.mkdtemp(prefix='cdetect_shell_')

    def tearDown(self):
        shutil.rmtree(self.workdir, ignore_errors=True)

    def script(self, name, text):
        path = os.path.join(self.workdir, name)
        with open(path, 'w') as sf:
            sf.write(text)
        os.chmod(path, os.stat(path).st_mode | stat.S_IEXEC)
        return path

    def executor(self, compiler):
        return ProbeExecutor(Toolchain(compiler=compiler, path=''), self.workdir,
                             UniqueNames(pid=0x2a), run_shell)

    def test_001_killed_compiler_is_fatal(self):
        executor = self.executor(self.script('killcc', KILLED_BY_TERM))
        with self.assertRaises(ProbeInterrupted) as ctx:
            executor.compile_source('int main(void) { return 0;}\n')
        self.assertEqual(ctx.exception.signum, signal.SIGTERM)

    def test_002_killed_program_is_fatal(self):
        executor = self.executor(self.script('buildcc', BUILDS_KILLER))
        with self.assertRaises(ProbeInterrupted) as ctx:
            executor.compile_source('int main(void) { return 0;}\n', execute=True)
        self.assertEqual(ctx.exception.signum, signal.SIGTERM)
        self.assertFalse(os.path.exists(os.path.join(self.workdir, 'cdetmp2a_0')))

    def test_003_failing_compiler_is_not_fatal(self):
        executor = self.executor(self.script('badcc', '#!/bin/sh\necho nope\nexit 1\n'))
        result = executor.compile_source('int main(void) { return 0;}\n')
        self.assertFalse(result.success)
        self.assertEqual(result.output, 'nope\n')

    def test_004_plain_command_output(self):
        executor = self.executor(None)
        result = executor.execute('echo hello')
        self.assertTrue(result.success)
        self.assertEqual(result.output, 'hello\n')


if __name__ == "__main__":
    unittest.main()
