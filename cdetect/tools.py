#
#  Tool variables (CC, CFLAGS, SHELL, ...) and PATH lookups
#

import os
import logging

from cdetect.ordmap import OrderedMap, Ownership
from cdetect.substitute import substitute

log = logging.getLogger(__name__)


def tool_exists(path):
    """True if 'path' exists, or the first word of it does.

    Quoted spaces inside the path are not handled.
    """
    if not path:
        return False
    if os.path.exists(path):
        return True
    first = path.split(' ', 1)[0]
    return bool(first) and os.path.exists(first)


class ToolMap(OrderedMap):
    """Variables available to @NAME@ substitution"""

    def __init__(self):
        super().__init__(Ownership.COPY)

    def define(self, name, value):
        """Store 'value', substituted against the current variables first.

        This is what lets CFLAGS be extended with '@CFLAGS=@ -O2'.
        """
        log.debug('define tool %s = %r', name, value)
        value, unresolved = substitute(value, self)
        return self.set(name, value.content)

    def define_bool(self, name, flag):
        return self.define(name, '1' if flag else '0')

    def check_with_path(self, variable, path, filter=None):
        """Define 'variable' as 'path' if it exists and passes the filter"""
        current = self.get(variable)
        if current is not None:
            return current
        if tool_exists(path) and (filter is None or filter(path)):
            return self.define(variable, path)
        return None

    def check(self, variable, tool, path_list, filter=None):
        """Scan the search path left to right for 'tool'.

        Returns:
            The value of 'variable' or None when nothing suitable was found.
        """
        if not tool:
            return None
        current = self.get(variable)
        if current is not None:
            return current
        for entry in path_list:
            candidate = os.path.join(entry, tool)
            result = self.check_with_path(variable, candidate, filter)
            if result is not None:
                return result
        return None

    def define_command(self, variable, command, executor):
        """Run 'command' and define 'variable' as its output without newlines"""
        command, unresolved = substitute(command, self)
        result = executor.execute(command)
        if not result.success:
            return None
        output = result.output
        output.trim('\r\n')
        return self.define(variable, output.content)
