import os
import re

from setuptools import find_packages, setup


def get_version():
    with open(os.path.join(os.path.dirname(__file__), 'genoannot', '__init__.py'), 'r') as fh:
        match = re.search(r"^__version__\s*=\s*['\"]([^'\"]+)['\"]", fh.read(), re.MULTILINE)
    if not match:
        raise RuntimeError('unable to find the package version')
    return match.group(1)


def parse_md_readme():
    try:
        with open('README.md', 'r') as fh:
            return fh.read()
    except OSError:
        return ''


# HSTLIB is a dependency for pysam.
# The cram file libraries fail for some OS versions and genoannot does not use cram files so we disable these options
os.environ['HTSLIB_CONFIGURE_OPTIONS'] = '--disable-lzma --disable-bz2 --disable-libcurl'


TEST_REQS = [
    'timeout-decorator>=0.3.3',
    'coverage>=4.2',
    'pycodestyle>=2.3.1',
    'pytest',
    'pytest-cov',
]


INSTALL_REQS = [
    'biopython>=1.78',
    'braceexpand>=0.1.2',
    'pysam>=0.15.2',
]

DEPLOY_REQS = ['twine', 'wheel']


setup(
    name='genoannot',
    version=get_version(),
    packages=find_packages(exclude=['tests', 'tests.*']),
    description='Genome annotation indexing, genic region classification and small variant consequence calling',
    long_description=parse_md_readme(),
    long_description_content_type='text/markdown',
    install_requires=INSTALL_REQS,
    extras_require={
        'test': TEST_REQS,
        'dev': ['black', 'flake8'] + TEST_REQS + DEPLOY_REQS,
        'deploy': DEPLOY_REQS,
    },
    tests_require=TEST_REQS,
    setup_requires=['pip>=9.0.0', 'setuptools>=36.0.0'],
    python_requires='>=3.6',
    test_suite='tests',
    entry_points={'console_scripts': ['genoannot = genoannot.main:main']},
)
