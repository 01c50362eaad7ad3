#!/usr/bin/env python
"""Setup script for viscocorrect-mcp package."""

from setuptools import setup, find_packages

# Read the README file
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="viscocorrect-mcp",
    version="1.0.0",
    author="Puran Water LLC",
    author_email="engineering@puranwater.com",
    description="MCP server for viscosity correction factors of centrifugal pumps",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/puran-water/viscocorrect-mcp",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["server"],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Scientific/Engineering",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.8",
    install_requires=[
        "mcp>=1.0.0,<2",
        "pydantic>=2.0.0",
        "numpy>=1.24.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "viscocorrect-mcp=server:main",
        ],
    },
)
