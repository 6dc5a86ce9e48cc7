#
#  @NAME@ / @NAME=default@ replacement for commands and template files
#

import os
import logging

from cdetect.dstring import DynamicString

log = logging.getLogger(__name__)

VARIABLE_BEGIN = '@'
VARIABLE_END = '@'
VARIABLE_DEFAULT = '='
VARIABLE_LINE = '\n'


def substitute(source, resolver):
    """Replace every known @NAME@ token in 'source'.

    Args:
        source: text (str or DynamicString)
        resolver: anything with a get(name) method; a None result means
                  the name is unknown

    Returns:
        Tuple (DynamicString, unresolved) where 'unresolved' lists the names
        that were copied through untouched.

    Tokens holding a newline are not tokens at all, their leading '@' is
    copied and scanning resumes right after it.  Values are inserted as-is
    and never scanned again.
    """
    text = str(source)
    target = DynamicString()
    unresolved = []
    before = 0

    while before < len(text):
        begin = text.find(VARIABLE_BEGIN, before)
        if begin < 0:
            target.append(text[before:])
            break
        target.append(text[before:begin])

        start = begin + len(VARIABLE_BEGIN)
        end = text.find(VARIABLE_END, start)
        if end < 0:
            # unterminated, keep the rest
            target.append(text[begin:])
            break

        line = text.find(VARIABLE_LINE, start, end)
        if line >= 0:
            target.append(VARIABLE_BEGIN)
            before = start
            continue

        token = text[start:end]
        name, separator, default = token.partition(VARIABLE_DEFAULT)
        value = resolver.get(name)
        if value is not None:
            target.append(str(value))
        elif separator:
            target.append(default)
        else:
            unresolved.append(name)
            target.append(text[begin:end + len(VARIABLE_END)])
        before = end + len(VARIABLE_END)

    return target, unresolved


def substitute_file(source, target, resolver, report=print):
    """Write 'target' as the substituted copy of 'source'"""
    log.debug('substitute_file(source=%r, target=%r)', source, target)

    with open(source, 'r') as sf:
        data = sf.read()

    output, unresolved = substitute(data, resolver)
    for name in unresolved:
        log.debug('%s: @%s@ left unresolved', source, name)

    if os.path.exists(target):
        os.remove(target)
    with open(target, 'w') as tf:
        tf.write(output.content)

    if report is not None:
        report('creating {} (from {})'.format(target, source))
    return output
