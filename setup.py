"""
Installs the xPL to HAN gateway package.

The tests live beside the modules as *_test.py. Install the test extra and run them with
`pytest src`.
"""

from setuptools import setup

setup(
    name='xplhan-gateway',
    version='0.0.1',
    description='Gateway between an xPL message bus and a HAN device controller.',
    url='',
    author='',
    author_email='',
    license='GPL',
    package_dir={'': 'src'},
    packages=['xplhan', 'xplhan.conduit', 'xplhan.config', 'xplhan.connector',
              'xplhan.protocol', 'xplhan.support'],
    package_data={'xplhan.config': ['xplhan.schema.cfg']},
    install_requires=['configobj'],
    extras_require={
        'test': ['PyHamcrest>=2.0', 'timeout-decorator', 'pytest'],
    },
    zip_safe=False,
)
