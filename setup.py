#!/usr/bin/env python

from setuptools import setup

setup(name='lrcalc',
      version='0.1',
      description='An LALR(1) calculator for sums of unsigned 64-bit '
                  'integers, with error recovery.',
      python_requires='>=3.6',
      py_modules=['lexer', 'grammar', 'tables', 'lalr', 'diagnostics',
                  'calc'],
      extras_require={'test': ['pytest']},
      entry_points={
          'console_scripts': ['lrcalc = calc:main'],
      },
)
