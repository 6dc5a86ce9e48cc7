"""
Pattern matching: case-insensitive wildcards and a small regular
expression engine.

The regular expressions understand literals, '.', the classes \\d \\s \\w,
escaped literals (\\\\ and friends), the postfix quantifiers ? * +,
alternation with | and grouping with (...).  There are no captures and no
back references.

A pattern compiles into an Automaton whose states live in a list and refer
to each other by index, so loops created by * and + need no special care.
"""

import collections

WILDCARD_MANY = '*'
WILDCARD_ONE = '?'

# transition kinds
LAMBDA = 'lambda'
ANY = 'any'
LITERAL = 'literal'
DIGIT = 'digit'
SPACE = 'space'
WORD = 'word'

_space = ' \t\n\r\f\v'


def match(string, pattern):
    """Wildcard comparison, '*' is any run and '?' any single character.

    Args:
        string: text to test
        pattern: wildcard pattern

    Returns:
        True when the whole string matches the pattern (case-insensitive).

    """
    if string is None or pattern is None:
        return string is pattern

    i = 0
    while i < len(pattern) and pattern[i] != WILDCARD_MANY:
        if i >= len(string):
            return False
        if pattern[i] != WILDCARD_ONE and string[i].upper() != pattern[i].upper():
            return False
        i += 1
    if i == len(pattern):
        return i == len(string)

    # collapse runs of '*' to keep the recursion shallow
    rest = pattern[i:].lstrip(WILDCARD_MANY)
    if not rest:
        return True
    for start in range(i, len(string) + 1):
        if match(string[start:], rest):
            return True
    return False


Transition = collections.namedtuple('Transition', ['kind', 'letter', 'target'])


class Automaton(object):
    """Arena of NFA states; a state is an index into 'states'"""

    def __init__(self):
        self.states = []
        self.start = self.new_state()
        self.final = self.new_state()

    def new_state(self):
        self.states.append([])
        return len(self.states) - 1

    def connect(self, begin, end, kind=LAMBDA, letter=None):
        self.states[begin].append(Transition(kind, letter, end))

    def outgoing(self, state):
        return self.states[state]


class Cursor(object):
    """Read position inside a pattern; advancing yields a new cursor"""

    __slots__ = ('text', 'pos')

    def __init__(self, text, pos=0):
        self.text = text
        self.pos = pos

    def peek(self, offset=0):
        at = self.pos + offset
        return self.text[at] if at < len(self.text) else ''

    def advance(self, count=1):
        return Cursor(self.text, self.pos + count)

    def at_end(self):
        return self.pos >= len(self.text)


def _class_transition(letter):
    if letter == 'd':
        return DIGIT, None
    if letter == 's':
        return SPACE, None
    if letter == 'w':
        return WORD, None
    return LITERAL, letter


class Regex(object):
    """Compiled regular expression.

    By default a match only requires that some state is still alive once
    the whole input has been consumed.  Pass strict=True to also require
    that the final state is reachable at that point.
    """

    def __init__(self, pattern, strict=False):
        self.pattern = pattern
        self.strict = strict
        self.automaton = Automaton()
        self._parse(Cursor(pattern), self.automaton.start, self.automaton.final)

    def _parse(self, cursor, start, final):
        nfa = self.automaton
        current = start
        alternation = start
        last_begin = last_end = None
        last_atom = None        # (kind, letter) of the last single-step atom
        last_entry = None       # first state inside the last group

        while not cursor.at_end():
            char = cursor.peek()

            if char == '?':
                if last_end is not None:
                    nfa.connect(last_begin, last_end)

            elif char == '*':
                if last_end is not None:
                    nfa.connect(last_begin, last_end)
                    if last_atom is None:
                        nfa.connect(last_end, last_entry)
                    else:
                        nfa.connect(last_end, last_end, *last_atom)

            elif char == '+':
                if last_end is not None:
                    if last_atom is None:
                        nfa.connect(last_end, last_entry)
                    else:
                        nfa.connect(last_end, last_end, *last_atom)

            elif char == '|':
                nfa.connect(current if last_end is None else last_end, final)
                current = alternation
                last_begin = last_end = None
                last_atom = None

            elif char == '(':
                group_start = nfa.new_state()
                group_final = nfa.new_state()
                cursor = self._parse(cursor.advance(), group_start, group_final)
                after = nfa.new_state()
                nfa.connect(current, group_start)
                nfa.connect(group_final, after)
                last_begin, last_end = current, after
                last_atom = None
                last_entry = group_start
                current = after
                # the recursion left the cursor on the ')'

            elif char == ')':
                break

            else:
                if char == '\\':
                    cursor = cursor.advance()
                    kind, letter = _class_transition(cursor.peek())
                elif char == '.':
                    kind, letter = ANY, None
                else:
                    kind, letter = LITERAL, char
                end = nfa.new_state()
                nfa.connect(current, end, kind, letter)
                last_begin, last_end = current, end
                last_atom = (kind, letter)
                current = end

            cursor = cursor.advance()

        nfa.connect(current if last_end is None else last_end, final)
        return cursor

    def _closure(self, states):
        reach = list(states)
        seen = set(reach)
        stack = list(reach)
        while stack:
            state = stack.pop()
            for trans in self.automaton.outgoing(state):
                if trans.kind == LAMBDA and trans.target not in seen:
                    seen.add(trans.target)
                    reach.append(trans.target)
                    stack.append(trans.target)
        return reach

    @staticmethod
    def _accepts(trans, char):
        if trans.kind == ANY:
            return True
        if trans.kind == LITERAL:
            return trans.letter == char
        if trans.kind == DIGIT:
            return char.isdigit()
        if trans.kind == SPACE:
            return char in _space
        if trans.kind == WORD:
            return char.isalnum()
        return False

    def _step(self, present, char):
        future = []
        for state in present:
            for trans in self.automaton.outgoing(state):
                if trans.kind != LAMBDA and self._accepts(trans, char) \
                   and trans.target not in future:
                    future.append(trans.target)
        return future

    def match(self, text):
        present = [self.automaton.start]
        for char in text:
            present = self._step(self._closure(present), char)
            if not present:
                return False
        if self.strict:
            return self.automaton.final in self._closure(present)
        return True


def compile(pattern, strict=False):
    return Regex(pattern, strict=strict)
