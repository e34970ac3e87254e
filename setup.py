"""
flatdocs setup.py — Package configuration and CLI entry point.
"""

from setuptools import find_packages, setup

setup(
    name="flatdocs",
    version="1.0.0",
    description="flatdocs — flat-file document repository with version history",
    packages=find_packages(include=["flatdocs", "flatdocs.*"]),
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "flatdocs=flatdocs.cli:main",
        ],
    },
    install_requires=[
        "pydantic>=2.5",
        "bcrypt>=4.1",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
        ],
    },
)
