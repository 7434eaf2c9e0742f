"""shacrypt setup script"""
#=========================================================
#init script env - ensure cwd = root of source dir
#=========================================================
import os
root_dir = os.path.abspath(os.path.join(__file__,".."))
os.chdir(root_dir)

#=========================================================
#imports
#=========================================================
import re

from setuptools import setup

#=========================================================
#version string
#=========================================================
with open(os.path.join(root_dir, "shacrypt", "__init__.py")) as vh:
    VERSION = re.search(r'^__version__\s*=\s*"(.*?)"\s*$', vh.read(), re.M).group(1)

#=========================================================
#static text
#=========================================================
SUMMARY = "create & verify legacy sha256-crypt / sha512-crypt password hashes"

DESCRIPTION = """\
shacrypt creates and verifies password hashes in the legacy
SHA256-Crypt (``$5$``) and SHA512-Crypt (``$6$``) formats found in
``/etc/shadow`` and many older applications.

It is meant as a migration shim: keep verifying existing hashes
while moving users to bcrypt or argon2. New hashes always use
a 96 bit salt and a minimum rounds value tuned against current GPUs,
and passwords over 1024 bytes are refused (CVE-2016-20013).
"""

KEYWORDS = "password secret hash security crypt sha256-crypt sha512-crypt"

#=========================================================
#config setup
#=========================================================
config = dict(
    #package info
    packages = [
        "shacrypt",
            "shacrypt.handlers",
            "shacrypt.tests",
            "shacrypt.utils",
        ],
    zip_safe=True,
    python_requires=">=3.8",

    #metadata
    name = "shacrypt",
    version = VERSION,
    license = "BSD",

    description = SUMMARY,
    long_description = DESCRIPTION,
    keywords = KEYWORDS,
    classifiers = [
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Natural Language :: English",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Topic :: Security :: Cryptography",
        "Topic :: Software Development :: Libraries",
    ],

    extras_require = {
        "test": ["pytest", "passlib >= 1.7"],
    },
)

#=========================================================
#build
#=========================================================
setup(**config)

#=========================================================
#EOF
#=========================================================
