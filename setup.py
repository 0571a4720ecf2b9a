#!/usr/bin/env python3
"""
stockdb Setup Script
====================
Allows installation of the stockdb package.

Usage:
    pip install -e .           # Development install
    pip install -e ".[test]"   # With test dependencies
    pip install .              # Regular install
"""

from setuptools import setup, find_packages

setup(
    name="stockdb",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "stockdb-server=stockdb.server:main",
            "stockdb-client=stockdb.client:main",
        ],
    },
)
