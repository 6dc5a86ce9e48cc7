#!/usr/bin/env python3

# ensure it is in ReST so PyPI is happy
"""
PyCDetect
=========

This is a package which detects the features of a C toolchain using nothing but the compiler. It is designed to:

- probe for headers, types, functions and libraries by compiling (and sometimes running) small snippets
- write the results as a config.h, a cache file and substituted template files (Makefile.in -> Makefile)
- work where no shell-based autoconf is available, including cross compilation through a remote runner

Usage
-----

A configure script is a small Python program::

  import sys
  from cdetect import Session

  with Session() as config:
      if config.options(sys.argv):
          config.check_header('stdio.h')
          config.check_func('sqrt', 'm')
          config.register_build('Makefile.in', 'Makefile')

Leaving the block writes cachect.txt, config.h and the Makefile.

The system is broken down in 3 layers:

:cdetect.session:
   the Session object which holds everything one run needs
:cdetect.autoconf:
   recipes which emulate the common autoconf macros on top of a Session
:cdetect.command:
   a setuptools 'build' command generating config.h for C extensions, and the 'python -m cdetect' entry point


Installation
------------

A plain install is all that is needed::

  pip install pycdetect

Projects with C extensions can plug the build command in::

  from cdetect.command import ConfigureBuild

  setup(..., cmdclass={'build': ConfigureBuild})

and pass detection options through it::

  python setup.py build --cc=clang --refresh

"""

from setuptools import setup

import cdetect

#
# Run the setup mechanism
#
setup(
    name='pycdetect',
    version=cdetect.version(),
    description='Compiler-only feature detection for C projects: '
                'config.h generation without a shell.',
    long_description=__doc__,
    long_description_content_type='text/x-rst',
    packages=[
        'cdetect',
        'cdetect.tests',
        'cdetect.tests.support'
    ],
    install_requires=[
        'setuptools>=62.4'
    ],
    entry_points={
        'console_scripts': [
            'pycdetect = cdetect.command:main'
        ]
    },
    test_suite='cdetect.tests',
    license='BSD',
    python_requires='>=3.7',
    classifiers=[
        'Environment :: Console',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: BSD License',
        'Operating System :: MacOS',
        'Operating System :: POSIX',
        'Operating System :: Microsoft :: Windows',
        'Programming Language :: C',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Software Development :: Build Tools'
    ]
)
