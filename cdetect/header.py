#
#  config.h generation
#

import os
import logging

from cdetect import formatter, version
from cdetect.dstring import transform_upper
from cdetect.ordmap import OrderedMap, Ownership
from cdetect.registry import FALSE, strip_context

log = logging.getLogger(__name__)

BANNER = '/* Autogenerated by pycdetect {} */\n'
GUARD_FORMAT = 'CDETECT_INCLUDE_GUARD_%s'
HOST_FORMATS = (
    ('compiler', 'CDETECT_COMPILER_%s'),
    ('kernel', 'CDETECT_KERNEL_%s'),
    ('cpu', 'CDETECT_CPU_%s'),
)


def macro_name(fmt, key, transform=transform_upper):
    """Turn a registry key into a macro name: drop the context, format,
    then make it a valid identifier."""
    raw = formatter.format(fmt, strip_context(key)).content
    return transform(raw) if transform else raw


class ConfigHeader(object):
    """Collects generic macros and writes the header file"""

    def __init__(self, path='config.h'):
        self.path = path
        self.macros = OrderedMap(Ownership.COPY)

    def define(self, macro, value):
        log.debug('define macro %s = %r', macro, value)
        self.macros.set(macro, str(value))

    def define_format(self, macro, fmt, *args):
        self.define(macro, formatter.vformat(fmt, args).content)

    @property
    def guard(self):
        name = os.path.basename(self.path)
        return transform_upper(formatter.format(GUARD_FORMAT, name).content)

    def lines(self, registries, host=None):
        """Every line of the header, in output order"""
        out = [BANNER.format(version()).rstrip('\n')]
        out.append('#ifndef {}'.format(self.guard))
        out.append('#define {}'.format(self.guard))
        out.append('')

        seen = set()

        def emit(macro, value):
            if macro in seen:
                return
            seen.add(macro)
            out.append('#define {} {}'.format(macro, value))

        # host fingerprint, only for the parts that were checked
        if host is not None:
            for part, fmt in HOST_FORMATS:
                if part in host.checked and host.name(part):
                    emit(macro_name(fmt, host.name(part)),
                         formatter.format('0x%x', host.version(part)).content)

        # detected features, false entries are left out
        for registry in registries:
            for key, value in registry.items():
                if value == FALSE:
                    continue
                emit(macro_name(registry.macro_format, key), value)

        # generic macros go out exactly as given
        for macro, value in self.macros.items():
            emit(macro, value)

        out.append('')
        out.append('#endif /* {} */'.format(self.guard))
        return out

    def write(self, registries, host=None):
        if not self.path:
            return False
        log.debug('writing %s', self.path)
        with open(self.path, 'w') as hf:
            hf.write('\n'.join(self.lines(registries, host)) + '\n')
        return True
