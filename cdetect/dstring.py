#
#  Growable text buffer used by the formatter, the probes and the cache
#

import os

# escape sequences used when quoting characters for logs and macros
_quoted_chars = {
    '"': '\\"',
    "'": "\\'",
    '\a': '\\a',
    '\b': '\\b',
    '\f': '\\f',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
    '\v': '\\v',
}

_digits = '0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ'
_hexdigits = '0123456789abcdefABCDEF'


def is_printable(char):
    return ' ' <= char <= '~' or (char > '\x7f' and char.isprintable())


def quote_char(char):
    """Render one character for logging (C escape sequences)"""
    if char in _quoted_chars:
        return _quoted_chars[char]
    if is_printable(char):
        return char
    return '\\x{:02X}'.format(ord(char) & 0xFF)


def quote(text):
    return ''.join(quote_char(c) for c in text)


def escape(text, separator='#', escape_char='\\'):
    """Hide every separator behind <escape><hex><escape>.

    Args:
        text: the raw field
        separator: the character, or string of characters, that must not
            appear in the output
        escape_char: the escape introducer, doubled when it is literal

    Returns:
        String free of bare separators.

    """
    out = []
    for char in text:
        if char == escape_char:
            out.append(escape_char * 2)
        elif char in separator:
            out.append('{0}{1:X}{0}'.format(escape_char, ord(char)))
        else:
            out.append(char)
    return ''.join(out)


def unescape(text, escape_char='\\'):
    """The inverse of escape()"""
    out = []
    i = 0
    while i < len(text):
        char = text[i]
        i += 1
        if char != escape_char:
            out.append(char)
            continue

        # doubled escape is a literal one
        if i < len(text) and text[i] == escape_char:
            out.append(escape_char)
            i += 1
            continue

        # <hex><escape>
        after = i
        while after < len(text) and text[after] in _hexdigits:
            after += 1
        if after > i:
            out.append(chr(int(text[i:after], 16)))
        i = after

        # swallow the closing escape
        if i < len(text) and text[i] == escape_char:
            i += 1
    return ''.join(out)


def transform_upper(text):
    """Make a valid C macro name out of arbitrary text"""
    out = []
    for char in text:
        if char.isascii() and char.isalnum():
            out.append(char.upper())
        elif char == '*':
            out.append('P')
        else:
            out.append('_')
    return ''.join(out)


class DynamicString(object):
    """Mutable text with an explicit capacity.

    'allocated' counts the terminator slot, so allocated > length holds
    after every successful mutation.  A 'limit' caps the capacity; hitting
    it is reported as an allocation failure (the mutator returns False and
    the buffer keeps its last valid state).
    """

    def __init__(self, content='', limit=None):
        self.limit = limit
        self._content = ''
        self.allocated = 1
        if content and not self.append(content):
            raise MemoryError('initial content exceeds the limit')

    def __str__(self):
        return self._content

    def __repr__(self):
        return 'DynamicString({!r})'.format(self._content)

    def __len__(self):
        return len(self._content)

    def __eq__(self, other):
        if isinstance(other, DynamicString):
            return self._content == other._content
        if isinstance(other, str):
            return self._content == other
        return NotImplemented

    def __hash__(self):
        return hash(self._content)

    def __getitem__(self, index):
        return self._content[index]

    @property
    def content(self):
        return self._content

    @property
    def length(self):
        return len(self._content)

    def copy(self):
        dup = DynamicString(limit=self.limit)
        dup.append(self._content)
        return dup

    def clear(self):
        self._content = ''

    def reserve(self, size):
        """Make room for 'size' characters plus the terminator"""
        if size < self.allocated:
            return True
        wanted = max(self.allocated * 2, size + 1)
        if self.limit is not None:
            if size + 1 > self.limit:
                return False
            wanted = min(wanted, self.limit)
        self.allocated = wanted
        return True

    def _grow(self, text):
        if not self.reserve(len(self._content) + len(text)):
            return False
        try:
            self._content += text
        except MemoryError:
            return False
        return True

    def append(self, text):
        if text is None:
            return True
        return self._grow(str(text))

    def append_char(self, char):
        return self._grow(char)

    def append_range(self, text, first, last):
        if text is None or first >= last:
            return True
        return self._grow(str(text)[first:last])

    def append_number(self, number, base=10):
        if not 2 <= base <= len(_digits):
            raise ValueError('unsupported base {}'.format(base))
        if number == 0:
            return self.append_char('0')
        sign = '-' if number < 0 else ''
        number = abs(number)
        digits = []
        while number > 0:
            digits.append(_digits[number % base])
            number //= base
        return self._grow(sign + ''.join(reversed(digits)))

    def append_quoted_char(self, char):
        return self._grow(quote_char(char))

    def append_path(self, path):
        if not self._content.endswith(os.sep):
            if not self.append_char(os.sep):
                return False
        return self.append(path)

    def find_char(self, offset, char):
        pos = self._content.find(char, offset)
        return self.length if pos < 0 else pos

    def find_last_char(self, char):
        pos = self._content.rfind(char)
        return self.length if pos < 0 else pos

    def contains_char(self, char):
        return char in self._content

    def trim(self, exclude):
        """Remove every character found in 'exclude', wherever it is"""
        self._content = ''.join(c for c in self._content if c not in exclude)

    def split(self, separator):
        """Cut at the first separator.

        The buffer keeps the head; the tail is returned as a new string,
        or None when there is no separator.
        """
        pos = self._content.find(separator)
        if pos < 0:
            return None
        rest = DynamicString(limit=self.limit)
        rest.append(self._content[pos + 1:])
        self._content = self._content[:pos]
        return rest

    def escape(self, separator='#'):
        return DynamicString(escape(self._content, separator))

    def unescape(self):
        return DynamicString(unescape(self._content))

    def quote(self):
        return DynamicString(quote(self._content))

    def transform_upper(self):
        return DynamicString(transform_upper(self._content))
