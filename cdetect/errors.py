#
#  Exceptions raised by the detection machinery
#

from setuptools.errors import ExecError, OptionError


class ConfigureError(Exception):
    """Something in the configuration is not right."""
    pass


class UsageError(ConfigureError, OptionError):
    """Bad command line option or missing option argument."""

    def __init__(self, message, option=None):
        super().__init__(message)
        self.option = option


class ProbeInterrupted(ConfigureError, ExecError):
    """A probe subprocess was terminated by a signal.

    This is fatal for the whole run; probes must not mask an interrupt
    sent by the operator.
    """

    def __init__(self, command, signum):
        super().__init__("command {!r} terminated by signal {:d}".format(
            command, signum))
        self.command = command
        self.signum = signum
