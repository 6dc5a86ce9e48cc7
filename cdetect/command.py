"""
setuptools integration and the command line entry point.

A project that needs a config.h for its extensions plugs ConfigureBuild
in as its 'build' command and overrides check_system()::

    class MyBuild(ConfigureBuild):
        def check_system(self, config):
            ac_header_stdc(config)
            config.check_func('strlcpy')

    setup(..., cmdclass={'build': MyBuild})
"""

import os
import sys
import logging

from setuptools.command.build import build
from setuptools.errors import SetupError

from cdetect.autoconf import ac_standard, register_autoconf
from cdetect.errors import ConfigureError, ProbeInterrupted, UsageError
from cdetect.session import Session

log = logging.getLogger(__name__)


class ConfigureBuild(build):
    """Build that generates config.h in build_temp first"""

    # option support
    user_options = build.user_options + [
        ('cc=', None, "C compiler command used for the feature checks"),
        ('cflags=', None, "extra flags for the feature checks"),
        ('remote=', None, "run check programs through this command"),
        ('refresh', None, "ignore results cached by earlier builds"),
        ('config-h=', None, "name of the generated header [default: config.h]"),
    ]
    boolean_options = build.boolean_options + ['refresh']

    def initialize_options(self):
        super().initialize_options()
        self.cc = None
        self.cflags = None
        self.remote = None
        self.refresh = None
        self.config_h = None

    def finalize_options(self):
        super().finalize_options()

        # setup the refresh to a boolean value
        self.refresh = bool(self.refresh)

        if self.config_h is None:
            self.config_h = 'config.h'

    def session_argv(self):
        """Command line equivalent of the build options"""
        # '--name = value' keeps values that start with '-' or hold spaces
        argv = ['setup.py']
        if self.cc:
            argv += ['--compiler', '=', self.cc]
        if self.cflags:
            argv += ['--cflags', '=', self.cflags]
        if self.remote:
            argv += ['--remote', '=', self.remote]
        if self.refresh:
            argv += ['--refresh']
        if self.verbose > 1:
            argv += ['--verbose']
        return argv

    def check_system(self, config):
        """Run the feature checks; override to add project specific ones"""
        ac_standard(config)

    def configure(self):
        os.makedirs(self.build_temp, exist_ok=True)
        config_h = os.path.join(self.build_temp, self.config_h)

        try:
            with Session() as config:
                register_autoconf(config)
                config.register_header(config_h)
                config.register_cache(os.path.join(self.build_temp, 'cachect.txt'))

                if not config.options(self.session_argv()):
                    raise SetupError("no working C compiler for the feature checks")

                self.check_system(config)
                config.generate_config_log(os.path.splitext(config_h)[0] + '.log')

        except ConfigureError as conf_err:
            raise SetupError(str(conf_err)) from conf_err

        return config_h

    def run(self):
        # generate config.h and make it visible to the extensions
        config_h = self.configure()
        for ext in self.distribution.ext_modules or []:
            if os.path.dirname(config_h) not in ext.include_dirs:
                ext.include_dirs.append(os.path.dirname(config_h))

        # now run the common build
        super().run()


def main(argv=None):
    """Run the standard recipes; returns the process exit code"""
    if argv is None:
        argv = sys.argv

    try:
        with Session() as config:
            register_autoconf(config)
            if config.options(argv):
                ac_standard(config)
            return config.exit_code or 0

    except UsageError as usage_err:
        print(usage_err, file=sys.stderr)
        return 2

    except ProbeInterrupted as probe_err:
        print(probe_err, file=sys.stderr)
        return 128 + probe_err.signum

    except ConfigureError as conf_err:
        print(conf_err, file=sys.stderr)
        return 1
