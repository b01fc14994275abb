#!/usr/bin/env python3
import setuptools

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setuptools.setup(
    name="wobblesync",
    version="1.0.0",
    description="Mirror your favorite RSS/Atom feeds as posts in Wobble topics.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
    install_requires=[
        "appdirs",
        "atoma",
        "Click>=8.0",
        "Faker",
        "requests",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points="""
        [console_scripts]
        wobblesync=wobblesync.cli:cli
    """,
)
