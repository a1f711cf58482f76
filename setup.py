#!/usr/bin/env python3

from setuptools import setup, find_packages


setup(
    name="facet-templates",
    version="0.1.0",
    description="Declarative templates that project objects into JSON-compatible data.",
    packages=find_packages("src"),
    package_dir={"": "src"},
    test_suite="facet.tests",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
    ]
)
