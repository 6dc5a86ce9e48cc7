#
#  Small printf/scanf dialect that understands DynamicString arguments
#
#  Format modifiers (any order, before the specifier):
#
#    *   field width is taken from the arguments
#    -   left align inside the field
#    ^   the argument is a DynamicString
#    '   surround the value with double quotes
#    #   C-escape the value (see dstring.quote)
#
#  Specifiers: s c d u x %.  Anything else is copied through unchanged,
#  the command templates depend on that.
#

from cdetect.dstring import DynamicString, quote

NULL_TEXT = '(null)'

_modifiers = "*-^'#"
_space = ' \t\n\r\f\v'
_hexdigits = '0123456789abcdefABCDEF'


def _pad(out, text, width, left):
    fill = ' ' * max(0, width - len(text))
    if left:
        out.append(text)
        out.append(fill)
    else:
        out.append(fill)
        out.append(text)


def _next(args, fmt):
    try:
        return next(args)
    except StopIteration:
        raise IndexError('not enough arguments for {!r}'.format(fmt)) from None


def vformat(fmt, args):
    """Format 'args' (a sequence) according to 'fmt'.

    Returns:
        A new DynamicString.

    Raises:
        IndexError when the arguments run out.
    """
    args = iter(args)
    out = DynamicString()
    i = 0
    while i < len(fmt):
        char = fmt[i]
        if char != '%':
            out.append_char(char)
            i += 1
            continue

        start = i
        i += 1

        # modifiers
        is_size = is_align = is_dynamic = is_quote = is_alternative = False
        while i < len(fmt) and fmt[i] in _modifiers:
            if fmt[i] == '*':
                is_size = True
            elif fmt[i] == '-':
                is_align = True
            elif fmt[i] == '^':
                is_dynamic = True
            elif fmt[i] == "'":
                is_quote = True
            else:
                is_alternative = True
            i += 1

        # literal width
        width = 0
        digits_at = i
        while i < len(fmt) and fmt[i].isdigit():
            i += 1
        if i > digits_at:
            width = int(fmt[digits_at:i])

        spec = fmt[i] if i < len(fmt) else ''
        if spec not in ('s', 'c', 'd', 'u', 'x', '%'):
            # unknown: copy through from the '%'
            out.append(fmt[start:i + 1])
            i += 1
            continue
        i += 1

        if spec == '%':
            out.append_char('%')
            continue

        if is_size:
            width = int(_next(args, fmt))
        value = _next(args, fmt)

        if spec == 's':
            if value is None:
                text = NULL_TEXT
                is_quote = False
            elif is_dynamic:
                text = value.content if isinstance(value, DynamicString) else str(value)
            else:
                text = str(value)
            if is_alternative:
                text = quote(text)
            if is_quote:
                text = '"' + text + '"'
        elif spec == 'c':
            text = value if isinstance(value, str) else chr(value)
        else:
            number = DynamicString()
            if spec == 'd':
                number.append_number(int(value), 10)
            elif spec == 'u':
                number.append_number(int(value) & 0xFFFFFFFF, 10)
            else:
                number.append_number(int(value) & 0xFFFFFFFF, 16)
            text = number.content

        pieces = []
        _pad(pieces, text, width, is_align)
        out.append(''.join(pieces))

    return out


def format(fmt, *args):
    return vformat(fmt, args)


def _skip(text, pos, chars):
    while pos < len(text) and text[pos] in chars:
        pos += 1
    return pos


def _skip_until(text, pos, chars):
    while pos < len(text) and text[pos] not in chars:
        pos += 1
    return pos


def scan(source, fmt):
    """Pick values out of 'source' according to 'fmt'.

    Returns:
        Tuple (count, values).  'count' is the number of directives
        consumed, or -1 when a literal character did not match.  'values'
        holds the captured items in directive order; ignored ('*')
        directives do not contribute.
    """
    text = source.content if isinstance(source, DynamicString) else source
    count = 0
    values = []
    i = 0
    j = 0
    while i < len(fmt):
        if fmt[i] != '%':
            if j >= len(text) or text[j] != fmt[i]:
                return -1, values
            j += 1
            i += 1
            if j >= len(text):
                break
            continue

        i += 1
        is_ignore = is_dynamic = False
        while i < len(fmt) and fmt[i] in '*^':
            if fmt[i] == '*':
                is_ignore = True
            else:
                is_dynamic = True
            i += 1

        spec = fmt[i] if i < len(fmt) else ''
        i += 1

        if spec == '%':
            if j >= len(text) or text[j] != '%':
                return -1, values
            j += 1

        elif spec == 'n':
            values.append(j)

        elif spec in ('u', 'x'):
            before = _skip(text, j, _space)
            digits = '0123456789' if spec == 'u' else _hexdigits
            after = _skip(text, before, digits)
            number = None
            if after > before:
                number = int(text[before:after], 10 if spec == 'u' else 16)
                j = after
            if not is_ignore:
                values.append(number)
            count += 1

        elif spec == 's':
            before = _skip(text, j, _space)
            after = _skip_until(text, before, _space)
            if not is_ignore:
                token = text[before:after] if after > before else None
                if token is not None and is_dynamic:
                    token = DynamicString(token)
                values.append(token)
            j = after
            count += 1

        elif spec == '[':
            negate = i < len(fmt) and fmt[i] == '^'
            if negate:
                i += 1
            close = fmt.find(']', i)
            if close < 0:
                close = len(fmt)
            group = fmt[i:close]
            i = close + 1
            if negate:
                after = _skip_until(text, j, group)
            else:
                after = _skip(text, j, group)
            if not is_ignore:
                token = text[j:after]
                values.append(DynamicString(token) if is_dynamic else token)
            j = after
            count += 1

        else:
            raise ValueError('unknown scan directive %{} in {!r}'.format(spec, fmt))

        if j >= len(text):
            break

    return count, values
