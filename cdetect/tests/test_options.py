"""
Unit testing for parts of the options module.
"""

import unittest

from cdetect.errors import UsageError
from cdetect.options import CONTINUE, ExitWithCode, OptionParser


class Parsing(unittest.TestCase):

    def setUp(self):
        self.parser = OptionParser()
        self.parser.register('flag', 'f', None, None, 'A switch')
        self.parser.register('name', 'n', '', None, 'Mandatory argument')
        self.parser.register('prefix', None, '/usr/local', None, 'With a default')
        self.parser.register('level', 'l', '1', '3', 'Optional argument')

    def parse(self, *args):
        return self.parser.parse(['prog'] + list(args))

    def test_001_switch(self):
        self.assertEqual(self.parse('--flag'), CONTINUE)
        self.assertTrue(self.parser.is_set('flag'))
        self.assertIsNone(self.parser.get('flag'))

    def test_002_long_forms(self):
        self.parse('--name=alpha beta')
        self.assertEqual(self.parser.get('name'), 'alpha')
        self.parse('--name', 'gamma')
        self.assertEqual(self.parser.get('name'), 'gamma')
        self.parse('--name', '=', 'delta')
        self.assertEqual(self.parser.get('name'), 'delta')

    def test_003_missing_argument(self):
        with self.assertRaises(UsageError) as ctx:
            self.parse('--name')
        self.assertEqual(str(ctx.exception), "Missing argument for option '--name'")
        with self.assertRaises(UsageError):
            self.parse('--name', '--flag')
        with self.assertRaises(UsageError):
            self.parse('-n')

    def test_004_unknown(self):
        with self.assertRaises(UsageError) as ctx:
            self.parse('--bogus')
        self.assertEqual(ctx.exception.option, '--bogus')
        with self.assertRaises(UsageError):
            self.parse('-z')

    def test_005_defaults(self):
        self.parse()
        self.assertEqual(self.parser.get('prefix'), '/usr/local')
        self.assertEqual(self.parser.get('level'), '1')
        self.assertFalse(self.parser.is_set('prefix'))

    def test_006_optional_argument(self):
        self.parse('--level')
        self.assertEqual(self.parser.get('level'), '3')
        self.parse('--level', '5')
        self.assertEqual(self.parser.get('level'), '5')
        self.parse('-l', '--flag')
        self.assertEqual(self.parser.get('level'), '3')

    def test_007_given_without_argument_keeps_default_value(self):
        self.parse('--prefix')
        self.assertEqual(self.parser.get('prefix'), '/usr/local')

    def test_008_short_combined(self):
        self.parse('-fn', 'omega')
        self.assertTrue(self.parser.is_set('flag'))
        self.assertEqual(self.parser.get('name'), 'omega')

    def test_009_plain_arguments_ignored(self):
        self.assertEqual(self.parse('configure', '-', '--flag'), CONTINUE)
        self.assertTrue(self.parser.is_set('flag'))

    def test_010_set(self):
        self.parser.set('name', 'given')
        self.assertEqual(self.parser.get('name'), 'given')
        self.assertIsNone(self.parser.get('unknown'))


class Callbacks(unittest.TestCase):

    def test_001_called_in_order(self):
        calls = []
        parser = OptionParser()

        def record(name, argument):
            calls.append((name, argument))

        parser.register('one', None, None, None, None, record)
        parser.register('two', None, '', None, None, record)
        parser.parse(['prog', '--two', 'x', '--one'])
        self.assertEqual(calls, [('two', 'x'), ('one', None)])

    def test_002_exit_stops_parsing(self):
        calls = []
        parser = OptionParser()
        parser.register('stop', None, None, None, None,
                        lambda name, argument: ExitWithCode(0))
        parser.register('later', None, None, None, None,
                        lambda name, argument: calls.append(name))
        self.assertEqual(parser.parse(['prog', '--stop', '--later']), ExitWithCode(0))
        self.assertEqual(calls, [])


class Usage(unittest.TestCase):

    def test_001_layout(self):
        parser = OptionParser()
        parser.register_group('General')
        parser.register('help', 'h', None, None, 'Output this help text')
        parser.register('prefix', None, '/usr/local', None, 'Installation prefix')
        parser.register('level', None, None, '3', 'Optional')

        lines = parser.usage().splitlines()
        self.assertEqual(lines[0], 'General:')
        self.assertEqual(lines[1], '  -h, --help' + ' ' * 27 + ' Output this help text')
        self.assertTrue(lines[2].startswith('      --prefix <argument>'))
        self.assertTrue(lines[2].endswith(' Installation prefix'))
        self.assertEqual(lines[3], ' ' * 40 + 'Default value   : /usr/local')
        self.assertIn('--level [<argument>]', lines[4])
        self.assertEqual(lines[5], ' ' * 40 + 'Default argument: 3')
        self.assertTrue(lines[-1].startswith('Default argument is used'))


if __name__ == "__main__":
    unittest.main()
