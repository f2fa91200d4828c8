#!/usr/bin/env python3
"""
Cached Web Server Setup Script
==============================
Allows installation of the cached-webserver package.

Usage:
    pip install -e .           # Development install
    pip install -e .[test]     # Development install with test tools
    pip install .              # Regular install
"""

from setuptools import setup, find_packages

setup(
    name="cached-webserver",
    version="1.0.0",
    packages=find_packages(include=["webserver", "webserver.*"]),
    python_requires=">=3.10",
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "webserver=webserver.server:main",
        ],
    },
)
