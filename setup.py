#!/usr/bin/python3
# Setup file for revgraph
# Copyright (C) 2026 The revgraph authors
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later

from setuptools import setup


setup(
    name="revgraph",
    version="0.1.0",
    description="Commit graph, refs and review notes for code review tooling",
    author="The revgraph authors",
    license="Apache-2.0 OR GPL-2.0-or-later",
    python_requires=">=3.9",
    packages=["revgraph"],
    package_data={"": ["py.typed"]},
    test_suite="tests",
    classifiers=[
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Operating System :: POSIX",
        "Topic :: Software Development :: Version Control",
    ],
)
