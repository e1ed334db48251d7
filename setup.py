import os
import sys

from setuptools import find_packages, setup
from setuptools.command.install import install

# --- Current version

VERSION = "0.1.0"

with open("README.md", "r") as fh:
    long_description = fh.read()


# --- Custom build classes

class VerifyVersionCommand(install):
    """Custom command to verify that the git tag matches our version"""
    description = 'verify that the git tag matches our version'

    def run(self):
        tag = os.getenv('CI_TAG')

        if tag != "v%s" % VERSION:
            info = "Git tag: {0} does not match the version of this app: {1}".format(
                tag, VERSION
            )
            sys.exit(info)

# --- Setup

setup(
    # Basic information
    name='queryview',
    version=VERSION,
    description="Live, filterable and sortable view over the queries of a cluster",
    long_description=long_description,
    long_description_content_type="text/markdown",
    python_requires=">=3.10",

    # Packages
    packages=find_packages("src"),
    package_dir={"": "src"},

    install_requires=[
        "click>=8.0",
        "httpx>=0.24",
        "humanfriendly>=10.0",
        "omegaconf>=2.3",
        "rich>=13.0",
        "termcolor>=2.1",
        "textual>=0.47",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "anyio>=4.0",
        ],
    },
    entry_points={
        "console_scripts": ["queryview=queryview.cli:main"],
    },

    # We do not allow archives
    zip_safe=False,

    # Version verification
    cmdclass={
        'verify': VerifyVersionCommand
    }
)
