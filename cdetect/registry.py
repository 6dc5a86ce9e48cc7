#
#  Detection registries for headers, types, functions and libraries
#

import enum
import logging

from cdetect import formatter
from cdetect.ordmap import OrderedMap, Ownership

log = logging.getLogger(__name__)

CONTEXT_SEPARATOR = '@'
HEADER_SEPARATOR = ','

TRUE = '1'
FALSE = '0'

SOURCE_HEADER = '%s#include <%s>\nint main(void) { return 0;}\n'
SOURCE_FUNCTION = ('#ifdef __cplusplus\nextern "C"\n#endif\n'
                   'char %s();\nint main(void) {%s(); return 0;}\n')
SOURCE_TYPE = 'int main(void) { int size;\nsize = sizeof(%s);\nreturn 0;}\n'
SOURCE_TYPE_HEADER = '#include <%s>\n' + SOURCE_TYPE
SOURCE_EMPTY = 'int main(void) { return 0;}\n'


class Report(enum.IntFlag):
    """Outcome of a check: found or not, probed now or taken from cache"""
    NONE = 0
    FOUND = 1
    CACHED = 2

    @property
    def found(self):
        return bool(self & Report.FOUND)

    @property
    def cached(self):
        return bool(self & Report.CACHED)


def composite_key(name, context=None):
    if context:
        return context + CONTEXT_SEPARATOR + name
    return name


def strip_context(key):
    """Drop the 'context@' prefix of a composite key"""
    pos = key.find(CONTEXT_SEPARATOR)
    return key if pos < 0 else key[pos + 1:]


def report_message(message, report):
    return 'checking for {}... {}{}'.format(
        message,
        'yes' if report & Report.FOUND else 'no',
        ' (cached)' if report & Report.CACHED else '')


class Registry(OrderedMap):
    """One kind of detected feature: composite key -> "1" / "0" """

    def __init__(self, kind, tag, macro_format):
        super().__init__(Ownership.COPY)
        self.kind = kind
        self.tag = tag
        self.macro_format = macro_format

    def lookup(self, name, context=None):
        """Cached report for (name, context), or None when never probed"""
        value = self.get(composite_key(name, context))
        if value is None:
            return None
        if value == TRUE:
            return Report.FOUND | Report.CACHED
        return Report.CACHED

    def define(self, name, context=None, found=True):
        self.set(composite_key(name, context), TRUE if found else FALSE)

    def true_keys(self):
        return [k for k, v in self.items() if v != FALSE]


class Registries(object):
    """The four registries, in the order they are persisted"""

    def __init__(self):
        self.header = Registry('header', 'HDR', 'CDETECT_HEADER_%s')
        self.type = Registry('type', 'TYP', 'CDETECT_TYPE_%s')
        self.function = Registry('function', 'FNC', 'CDETECT_FUNC_%s')
        self.library = Registry('library', 'LIB', 'CDETECT_LIB_%s')

    def __iter__(self):
        return iter([self.header, self.type, self.function, self.library])

    def by_tag(self, tag):
        for registry in self:
            if registry.tag == tag:
                return registry
        return None

    def clear(self):
        for registry in self:
            registry.clear()


class Detector(object):
    """Run header/type/function/library checks through a probe executor.

    A check first consults its registry; only a miss compiles a snippet.
    Every check hands its message and Report to 'reporter'.
    """

    def __init__(self, registries, executor, reporter=None):
        self.registries = registries
        self.executor = executor
        self.reporter = reporter

    def _report(self, message, report):
        if self.reporter is not None:
            self.reporter(message, report)

    def _compile(self, source, ldflags=''):
        result = self.executor.compile_source(source, '', ldflags)
        return Report.FOUND if result.success else Report.NONE

    # headers

    def _probe_header(self, header, depends=None):
        registry = self.registries.header
        report = registry.lookup(header, depends)
        if report is not None:
            return report

        # prerequisites, left to right, each one seeing the earlier ones
        preclude = ''
        if depends:
            for dep in [d.strip() for d in depends.split(HEADER_SEPARATOR)]:
                if not dep:
                    continue
                dep_report = registry.lookup(dep)
                if dep_report is None:
                    dep_report = self._compile(formatter.format(SOURCE_HEADER, preclude, dep))
                    registry.define(dep, None, dep_report.found)
                if dep_report.found:
                    preclude += '#include <{}>\n'.format(dep)

        return self._compile(formatter.format(SOURCE_HEADER, preclude, header))

    def check_header(self, header, depends=None):
        """Look for a header, optionally after a comma separated list of
        headers it depends on."""
        log.debug('check_header(header=%r, depends=%r)', header, depends)
        depends = depends or None
        report = self._probe_header(header, depends)
        self._report(formatter.format('<%s>', header), report)
        self.registries.header.define(header, depends, report.found)
        return report

    # types

    def check_type(self, type_name, header=None):
        log.debug('check_type(type=%r, header=%r)', type_name, header)
        header = header or None
        registry = self.registries.type

        report = registry.lookup(type_name, header)
        if report is None:
            if header:
                source = formatter.format(SOURCE_TYPE_HEADER, header, type_name)
            else:
                source = formatter.format(SOURCE_TYPE, type_name)
            report = self._compile(source)

        if header:
            self._report(formatter.format('type %s in <%s>', type_name, header), report)
        else:
            self._report(formatter.format('type %s', type_name), report)

        registry.define(type_name, header, report.found)
        if header and report.found:
            self.registries.header.define(header, None, True)
        return report

    # functions and libraries

    def _library_flags(self, library):
        if not library:
            return ''
        return formatter.format(self.executor.toolchain.library_format, library).content

    def check_function(self, function, library=None):
        log.debug('check_function(function=%r, library=%r)', function, library)
        library = library or None
        registry = self.registries.function

        report = registry.lookup(function, library)
        if report is None:
            source = formatter.format(SOURCE_FUNCTION, function, function)
            report = self._compile(source, self._library_flags(library))

        if library:
            self._report(formatter.format('%s() in library %s', function, library), report)
        else:
            self._report(formatter.format('%s()', function), report)

        registry.define(function, library, report.found)
        if library:
            self._note_library(library, report.found)
        return report

    def _note_library(self, library, found):
        registry = self.registries.library
        if found or not registry.exists(library):
            registry.define(library, None, found)

    def check_library(self, library, function=None):
        """Check that a program links against 'library'.

        With a function this is the same as check_function(function,
        library); without one an empty program is linked.
        """
        if function:
            return self.check_function(function, library)

        log.debug('check_library(library=%r)', library)
        registry = self.registries.library
        report = registry.lookup(library)
        if report is None:
            report = self._compile(SOURCE_EMPTY, self._library_flags(library))
        self._report(formatter.format('library %s', library), report)
        registry.define(library, None, report.found)
        return report
