"""Python setup.py for keygen_backend package"""
from setuptools import find_packages, setup

_long_description = ""

try:
    with open('README.md', 'rt') as f:
        _long_description = f.read()
except FileNotFoundError:
    pass

setup(
    name="keygen_backend",
    version='0.1.0',
    description="Typed Python bindings to the Keygen licensing JSON:API",
    long_description=_long_description,
    long_description_content_type="text/markdown",
    author="Benjamin Davis",
    packages=find_packages('src', exclude=["tests", ".github"]),
    package_dir={"": 'src'},
    python_requires='>=3.9',
    install_requires=[
        'requests',
        'msgspec>=0.18.5',
        'pandas',
        'cachetools',
    ],
    extras_require={"test": ['pytest', 'keyring']},
)
