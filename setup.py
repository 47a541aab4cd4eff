"""A declarative command-line grammar: flags, positional arguments, and
nested commands, matched by a small recursive-descent parser, with
typed values, help generation, and a test client.
"""

from setuptools import setup


__author__ = 'The clitree authors'
__version__ = '0.1.0'
__contact__ = 'clitree@example.org'
__url__ = 'https://example.org/clitree'
__license__ = 'BSD'


setup(name='clitree',
      version=__version__,
      description="A declarative command-line grammar and parser, with nested commands and typed values.",
      long_description=__doc__,
      author=__author__,
      author_email=__contact__,
      url=__url__,
      packages=['clitree', 'clitree.test'],
      include_package_data=True,
      zip_safe=False,
      license=__license__,
      platforms='any',
      install_requires=['boltons>=20.0.0'],
      extras_require={'test': ['pytest']},
      classifiers=[
          'Topic :: Utilities',
          'Intended Audience :: Developers',
          'Topic :: Software Development :: Libraries',
          'Programming Language :: Python :: 3.8',
          'Programming Language :: Python :: 3.9',
          'Programming Language :: Python :: 3.10',
          'Programming Language :: Python :: 3.11',
          'Programming Language :: Python :: 3.12',
          'Programming Language :: Python :: 3 :: Only',
          'Programming Language :: Python :: Implementation :: CPython',
          'Programming Language :: Python :: Implementation :: PyPy', ]
      )
