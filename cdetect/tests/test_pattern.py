"""
Unit testing for parts of the pattern module.
"""

import unittest

from cdetect import pattern
from cdetect.pattern import Automaton, Cursor, match


class Wildcards(unittest.TestCase):

    def test_001_star(self):
        self.assertTrue(match('hello.c', '*.c'))
        self.assertFalse(match('hello.h', '*.c'))

    def test_002_question(self):
        self.assertTrue(match('a', '?'))
        self.assertFalse(match('ab', '?'))
        self.assertFalse(match('', '?'))

    def test_003_case_insensitive(self):
        self.assertTrue(match('GCC', 'gcc'))
        self.assertTrue(match('SunOS', 'sun*'))

    def test_004_trailing_star_matches_empty(self):
        self.assertTrue(match('gcc', 'gcc*'))
        self.assertTrue(match('', '*'))

    def test_005_inner_stars(self):
        self.assertTrue(match('libfoo.so.1', 'lib*.so*'))
        self.assertFalse(match('libfoo.a', 'lib*.so*'))
        self.assertTrue(match('abcabc', '*b?a*'))

    def test_006_none(self):
        self.assertFalse(match(None, '*'))
        self.assertTrue(match(None, None))


class Regexes(unittest.TestCase):

    def check(self, regex, good, bad, strict=False):
        compiled = pattern.compile(regex, strict=strict)
        for text in good:
            self.assertTrue(compiled.match(text), '{!r} !~ {!r}'.format(text, regex))
        for text in bad:
            self.assertFalse(compiled.match(text), '{!r} =~ {!r}'.format(text, regex))

    def test_001_literals(self):
        self.check('abc', ['abc'], ['abd', 'xbc'])

    def test_002_any(self):
        self.check('a.c', ['abc', 'a-c', 'a.c'], ['ab'], strict=True)

    def test_003_star(self):
        self.check('ab*c', ['ac', 'abc', 'abbbbc'], ['abxc', 'ab'], strict=True)

    def test_004_plus(self):
        self.check('ab+c', ['abc', 'abbc'], ['ac'], strict=True)

    def test_005_optional(self):
        self.check('colou?r', ['color', 'colour'], ['colouur'], strict=True)

    def test_006_alternation(self):
        self.check('cat|dog', ['cat', 'dog'], ['cow'], strict=True)

    def test_007_groups(self):
        self.check('(ab)+c', ['abc', 'ababc'], ['ac', 'abac'], strict=True)
        self.check('x(ab)*', ['x', 'xab', 'xabab'], ['xa'], strict=True)

    def test_008_leading_group(self):
        self.check('(a|b)c', ['ac', 'bc'], ['cc', 'c'], strict=True)

    def test_009_classes(self):
        self.check('\\d+', ['0', '123'], ['a', ''], strict=True)
        self.check('\\s', [' ', '\t'], ['x'], strict=True)
        self.check('\\w+', ['abc1'], ['a_b', '-'], strict=True)
        self.check('a\\.b', ['a.b'], ['axb'], strict=True)

    def test_010_permissive_prefix(self):
        # a live state at the end of input is enough by default
        self.assertTrue(pattern.compile('abc').match('ab'))
        self.assertFalse(pattern.compile('abc', strict=True).match('ab'))
        self.assertFalse(pattern.compile('abc').match('abcd'))


class Machinery(unittest.TestCase):

    def test_001_arena(self):
        nfa = Automaton()
        self.assertEqual((nfa.start, nfa.final), (0, 1))
        state = nfa.new_state()
        nfa.connect(nfa.start, state, pattern.LITERAL, 'a')
        nfa.connect(state, state, pattern.LITERAL, 'a')
        self.assertEqual(nfa.outgoing(state)[0].target, state)

    def test_002_cursor_is_a_value(self):
        first = Cursor('ab')
        second = first.advance()
        self.assertEqual(first.peek(), 'a')
        self.assertEqual(second.peek(), 'b')
        self.assertTrue(second.advance().at_end())
        self.assertEqual(second.advance().peek(), '')


if __name__ == "__main__":
    unittest.main()
