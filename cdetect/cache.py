#
#  Persist the detection registries between runs
#
#  File layout:
#
#    CDETECT#<major>.<minor>.<patch>
#    HDR#<key>#<value>
#    TYP#<key>#<value>
#    ...
#
#  Keys and values are escaped so they never contain a bare '#', CR or LF.
#

import os
import logging

from cdetect import VERSION_INFO
from cdetect import formatter
from cdetect.dstring import escape, unescape

log = logging.getLogger(__name__)

SEPARATOR = '#'
RESERVED = SEPARATOR + '\r\n'
HEADER_FORMAT = 'CDETECT#%u.%u.%u'
RECORD_FORMAT = '%^[^#]#%^[^#]#%^[^#]'


def encode(tag, key, value):
    return formatter.format('%s%c%s%c%s', tag, SEPARATOR, escape(key, RESERVED),
                            SEPARATOR, escape(value, RESERVED)).content


class CacheFile(object):
    """Cache file holding the registries of earlier runs"""

    def __init__(self, path='cachect.txt', version_info=None):
        self.path = path
        self.version_info = version_info or VERSION_INFO

    def remove(self):
        if os.path.exists(self.path):
            os.remove(self.path)
            return True
        return False

    def dumps(self, registries):
        lines = [formatter.format(HEADER_FORMAT, *self.version_info[:3]).content]
        for registry in registries:
            for key, value in registry.items():
                lines.append(encode(registry.tag, key, value))
        return '\n'.join(lines) + '\n'

    def save(self, registries):
        log.debug('saving cache %s', self.path)
        with open(self.path, 'w') as cf:
            cf.write(self.dumps(registries))

    def decode(self, line, registries):
        """Put one record back into its registry.

        Returns:
            True if the record was adopted.
        """
        count, values = formatter.scan(line, RECORD_FORMAT)
        if count != 3:
            log.debug('malformed cache line %r', line)
            return False

        tag, key, value = [v.content for v in values]
        registry = registries.by_tag(tag)
        if registry is None:
            log.debug('unknown cache entry %r', line)
            return False

        registry.set(unescape(key), unescape(value))
        return True

    def loads(self, data, registries):
        """Load cache text; the number of adopted records is returned"""
        lines = data.split('\n')
        count, version = formatter.scan(lines[0].rstrip('\r'), HEADER_FORMAT)
        if count != 3 or len(version) != 3:
            log.debug('cache %s has no version header, ignored', self.path)
            return 0
        if version[0] != self.version_info[0]:
            log.debug('cache %s is version %u.%u.%u, ignored',
                      self.path, version[0], version[1], version[2])
            return 0

        adopted = 0
        for line in lines[1:]:
            line = line.rstrip('\r')
            if not line:
                continue
            if self.decode(line, registries):
                adopted += 1
        return adopted

    def load(self, registries):
        if not os.path.exists(self.path):
            return 0
        log.debug('loading cache %s', self.path)
        with open(self.path, 'r') as cf:
            return self.loads(cf.read(), registries)
