#
#  Command line options
#
#  An option's argument kind follows from its defaults:
#
#    default_value  default_argument   argument
#    -------------  ----------------   --------
#    None           None               none
#    set            None               mandatory ('' means no usable default)
#    any            set                optional
#

import collections
import logging

from cdetect.errors import UsageError
from cdetect.ordmap import OrderedMap, Ownership

log = logging.getLogger(__name__)

USAGE_INDENT = 40
FOOTNOTES = (
    'Default value is used if the option is omitted.',
    'Default argument is used if the option is used without an argument.',
)


class Continue(object):
    """Keep on parsing"""

    def __repr__(self):
        return 'Continue()'

    def __eq__(self, other):
        return isinstance(other, Continue)

    def __hash__(self):
        return hash(Continue)


ExitWithCode = collections.namedtuple('ExitWithCode', ['code'])

CONTINUE = Continue()


class Option(object):

    def __init__(self, long_name, short_name=None, default_value=None,
                 default_argument=None, help=None, callback=None):
        self.long_name = long_name
        self.short_name = short_name or None
        self.default_value = default_value
        self.default_argument = default_argument
        self.help = help
        self.callback = callback

    @property
    def takes_argument(self):
        return self.default_value is not None or self.default_argument is not None

    @property
    def optional_argument(self):
        return self.default_argument is not None

    @property
    def mandatory(self):
        """The argument is required and there is nothing to fall back on"""
        return (not self.optional_argument
                and self.default_value is not None
                and self.default_value == '')

    def usage_lines(self):
        if self.short_name:
            flag = '-{},'.format(self.short_name)
        else:
            flag = '   '
        if self.optional_argument:
            argument = ' [<argument>]'
        elif self.takes_argument:
            argument = ' <argument>'
        else:
            argument = ''

        skip = max(0, USAGE_INDENT - 9 - len(self.long_name))
        lines = ['  {} --{}{:<{}} {}'.format(flag, self.long_name, argument,
                                             skip, self.help or '')]
        if self.default_value:
            lines.append('{}Default value   : {}'.format(' ' * USAGE_INDENT,
                                                         self.default_value))
        if self.default_argument:
            lines.append('{}Default argument: {}'.format(' ' * USAGE_INDENT,
                                                         self.default_argument))
        return lines


class OptionParser(object):
    """Registered options (and group titles) in registration order.

    Group titles are stored with a None option so they keep their place
    in the usage text.
    """

    def __init__(self):
        self.options = OrderedMap(Ownership.BORROW)
        # long name -> argument given by the user (None: given without one)
        self.values = OrderedMap(Ownership.COPY)

    def register_group(self, title):
        self.options.set(title, None)
        return True

    def register(self, long_name, short_name=None, default_value=None,
                 default_argument=None, help=None, callback=None):
        log.debug('register option %r (short=%r, default=%r, argument=%r)',
                  long_name, short_name, default_value, default_argument)
        if callback is None:
            callback = self._remember
        option = Option(long_name, short_name, default_value,
                        default_argument, help, callback)
        self.options.set(long_name, option)
        return option

    def _remember(self, name, argument):
        self.set(name, argument)
        return CONTINUE

    def find_long(self, long_name):
        return self.options.get(long_name)

    def find_short(self, short_name):
        for option in self.options.values():
            if option is not None and option.short_name == short_name:
                return option
        return None

    def get(self, long_name):
        """Value of an option.

        Returns:
            The argument given by the user; the default argument when the
            option was given without one; the default value when it was
            not given at all.
        """
        option = self.find_long(long_name)
        if long_name in self.values:
            value = self.values.get(long_name)
            if value is not None:
                return value
            if option is None:
                return None
            if option.default_argument is not None:
                return option.default_argument
            return option.default_value
        return option.default_value if option else None

    def set(self, long_name, value):
        self.values.set(long_name, value)
        return True

    def is_set(self, long_name):
        return long_name in self.values

    def usage(self):
        lines = []
        for key, option in self.options.items():
            if option is None:
                lines.append('{}:'.format(key))
            else:
                lines.extend(option.usage_lines())
        lines.extend(FOOTNOTES)
        return '\n'.join(lines) + '\n'

    #
    #  parsing
    #

    def _long_argument(self, text, argv, index):
        """Find the argument of a long option.

        Returns:
            Tuple (argument, index of the last argv item consumed).
        """
        name, separator, argument = text[2:].partition('=')
        if separator:
            words = argument.split()
            return (words[0] if words else None), index

        if index + 1 < len(argv):
            parameter = argv[index + 1]
            if parameter.startswith('-'):
                return None, index
            if parameter == '=':
                if index + 2 < len(argv):
                    return argv[index + 2], index + 2
                return None, index + 1
            return parameter, index + 1
        return None, index

    def _invoke(self, option, argument):
        result = option.callback(option.long_name, argument)
        if result is None:
            return CONTINUE
        return result

    def parse(self, argv):
        """Parse argv (argv[0] is the program name).

        Returns:
            CONTINUE, or the first ExitWithCode a callback produced.

        Raises:
            UsageError for unknown options and missing arguments.
        """
        index = 1
        while index < len(argv):
            current = argv[index]

            # plain arguments are ignored
            if not current.startswith('-') or current == '-':
                index += 1
                continue

            if current.startswith('--'):
                name = current[2:].partition('=')[0]
                option = self.find_long(name) if name else None
                if option is None:
                    raise UsageError("Error in option '{}'".format(current),
                                     current)

                argument = None
                if option.takes_argument:
                    argument, index = self._long_argument(current, argv, index)
                    if argument is None and option.mandatory:
                        raise UsageError(
                            "Missing argument for option '{}'".format(current),
                            current)

                result = self._invoke(option, argument)
                if result != CONTINUE:
                    return result

            else:
                # one or more short options, arguments follow in order
                for short_name in current[1:]:
                    option = self.find_short(short_name)
                    if option is None:
                        raise UsageError("Error in option '{}'".format(current),
                                         current)

                    argument = None
                    if option.takes_argument and not option.optional_argument:
                        if index + 1 >= len(argv):
                            raise UsageError(
                                "Missing argument for option '{}'".format(current),
                                current)
                        index += 1
                        argument = argv[index]
                    elif option.optional_argument:
                        if index + 1 < len(argv) and not argv[index + 1].startswith('-'):
                            index += 1
                            argument = argv[index]

                    result = self._invoke(option, argument)
                    if result != CONTINUE:
                        return result

            index += 1

        return CONTINUE
