from setuptools import setup, find_packages
from pathlib import Path

package_name = 'default-rolebinding-operator'
description = (
    'A Kubernetes Operator that ensures every namespace carries the default '
    'image-puller, image-builder and deployer RoleBindings.'
)
author = 'Association of Universities for Research in Astronomy'
author_email = 'sqre-admin@lists.lsst.org'
license = 'MIT'
url = 'https://github.com/lsst-sqre/default-rolebinding-operator'
pypi_classifiers = [
    'Development Status :: 4 - Beta',
    'License :: OSI Approved :: MIT License',
    'Programming Language :: Python :: 3.10'
]
keywords = ['lsst', 'kubernetes', 'rbac']
readme = Path(__file__).parent / 'README.rst'

# Core dependencies
install_requires = [
    'kopf>=1.37',
    'kubernetes>=29.0.0',
    'structlog>=23.1.0',
]

# Test dependencies
tests_require = [
    'pytest>=7.4',
    'PyYAML>=6.0',
]
tests_require += install_requires

# Optional dependencies (like for dev)
extras_require = {
    'test': tests_require,
    # For development environments
    'dev': tests_require,
}

# Setup-time dependencies
setup_requires = [
    'setuptools_scm',
]

setup(
    name=package_name,
    description=description,
    long_description=readme.read_text(),
    author=author,
    author_email=author_email,
    url=url,
    license=license,
    classifiers=pypi_classifiers,
    keywords=keywords,
    package_dir={'': 'src'},
    packages=find_packages('src', exclude=['docs', 'tests']),
    python_requires='>=3.10',
    install_requires=install_requires,
    setup_requires=setup_requires,
    extras_require=extras_require,
    use_scm_version={'fallback_version': '0.1.0'},
    include_package_data=True
)
