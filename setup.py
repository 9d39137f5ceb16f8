#!/usr/bin/env python3
"""
Setup configuration for catbreeds-sync
An offline-capable cat breed catalog synced from The Cat API
"""

from setuptools import setup, find_packages

# Read README for long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Core requirements (always installed)
core_requirements = [
    "requests>=2.31.0",
    "click>=8.1.7",
    "rich-click>=1.7.0",
    "rich>=13.7.0",
    "pyyaml>=6.0.1",
    "tqdm>=4.66.1",
    "python-dotenv>=1.0.0",
]

setup(
    name="catbreeds-sync",
    version="0.3.0",
    author="catbreeds-sync Team",
    description="Browse The Cat API breed catalog online or offline, with local favorites",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["catbreeds", "catbreeds.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
    ],
    python_requires=">=3.10",
    install_requires=core_requirements,
    extras_require={
        "dev": [
            "pytest>=7.4.3",
        ],
    },
    entry_points={
        "console_scripts": [
            "catbreeds=catbreeds.cli:main",
        ],
    },
    keywords="cats breeds thecatapi cache offline cli",
)
