"""
Unit testing for parts of the formatter module.
"""

import unittest

from cdetect.dstring import DynamicString
from cdetect import formatter


class Formatting(unittest.TestCase):

    def test_001_plain(self):
        self.assertEqual(formatter.format('%s-%d', 'abc', 12), 'abc-12')

    def test_002_quoted(self):
        self.assertEqual(formatter.format("%'s", 'x'), '"x"')

    def test_003_width(self):
        self.assertEqual(formatter.format('%5d', 3), '    3')
        self.assertEqual(formatter.format('%-5d', 3), '3    ')
        self.assertEqual(formatter.format('[%-4s]', 'ab'), '[ab  ]')

    def test_004_dynamic_width(self):
        self.assertEqual(formatter.format('%*d', 4, 7), '   7')
        self.assertEqual(formatter.format('%-*s|', 3, 'a'), 'a  |')

    def test_005_hex_unsigned(self):
        self.assertEqual(formatter.format('%x', 255), 'FF')
        self.assertEqual(formatter.format('0x%x', 0x0b020000), '0xB020000')
        self.assertEqual(formatter.format('%u', -1), '4294967295')

    def test_006_null(self):
        self.assertEqual(formatter.format('%s', None), '(null)')
        self.assertEqual(formatter.format("%'s", None), '(null)')

    def test_007_alternative_escapes(self):
        self.assertEqual(formatter.format('%#s', 'a\nb'), 'a\\nb')

    def test_008_dynamic_string_argument(self):
        self.assertEqual(formatter.format('<%^s>', DynamicString('stdio.h')), '<stdio.h>')

    def test_009_char(self):
        self.assertEqual(formatter.format('%c%c', 'a', 66), 'aB')

    def test_010_percent_and_unknown(self):
        self.assertEqual(formatter.format('100%%'), '100%')
        self.assertEqual(formatter.format('%q'), '%q')
        self.assertEqual(formatter.format('/Fe%s', 'x'), '/Fex')

    def test_011_missing_argument(self):
        with self.assertRaises(IndexError):
            formatter.format('%s %s', 'only one')

    def test_012_returns_dynamic_string(self):
        self.assertIsInstance(formatter.format('x'), DynamicString)


class Scanning(unittest.TestCase):

    def test_001_version_header(self):
        count, values = formatter.scan('CDETECT#0.3.0', 'CDETECT#%u.%u.%u')
        self.assertEqual(count, 3)
        self.assertEqual(values, [0, 3, 0])

    def test_002_cache_record(self):
        count, values = formatter.scan('HDR#sys/types.h#1', '%^[^#]#%^[^#]#%^[^#]')
        self.assertEqual(count, 3)
        self.assertEqual([v.content for v in values], ['HDR', 'sys/types.h', '1'])

    def test_003_literal_mismatch(self):
        count, values = formatter.scan('XDETECT#0.3.0', 'CDETECT#%u.%u.%u')
        self.assertEqual(count, -1)

    def test_004_skip_whitespace(self):
        count, values = formatter.scan('  42   abc', '%u %s')
        self.assertEqual(count, 2)
        self.assertEqual(values, [42, 'abc'])

    def test_005_hex(self):
        count, values = formatter.scan('b020000', '%x')
        self.assertEqual(values, [0xb020000])

    def test_006_ignored(self):
        count, values = formatter.scan('key=value', '%*[^=]=%s')
        self.assertEqual(count, 2)
        self.assertEqual(values, ['value'])

    def test_007_input_exhausted(self):
        count, values = formatter.scan('CDETECT#1', 'CDETECT#%u.%u.%u')
        self.assertEqual(count, 1)
        self.assertEqual(values, [1])

    def test_008_empty_group(self):
        count, values = formatter.scan(':5', '%[^:]:%x')
        self.assertEqual(count, 2)
        self.assertEqual(values, ['', 5])

    def test_009_position(self):
        count, values = formatter.scan('abc def', '%s%n')
        self.assertEqual(values, ['abc', 3])


class Importers(unittest.TestCase):

    def test_001_builtin_format_not_shadowed(self):
        from cdetect import cache, header, probe, registry
        for module in (cache, header, probe, registry):
            self.assertNotIn('format', vars(module), module.__name__)


if __name__ == "__main__":
    unittest.main()
