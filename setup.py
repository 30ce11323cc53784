#!/usr/bin/env python
"""
Setup configuration for the cuetrack package

Installation:
    pip install -e .

Installation with development dependencies:
    pip install -e ".[dev]"
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

setup(
    name="cuetrack",
    version="0.1.0",
    description="Real-time 3D multi-object tracking engine with occlusion handling and trajectory prediction",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="cuetrack Project Team",
    author_email="",
    license="MIT",
    python_requires=">=3.8",

    packages=find_packages(include=["cuetrack*"]),

    # Core dependencies
    install_requires=[
        # Scientific computing
        "numpy>=1.21.0",
        "scipy>=1.7.0",

        # Configuration
        "pyyaml>=5.4.0",

        # Logging
        "loguru>=0.6.0",

        # Progress bars
        "tqdm>=4.60.0",
    ],

    # Optional dependencies for development
    extras_require={
        "dev": [
            "pytest>=6.2.0",
            "pytest-cov>=2.12.0",
            "black>=21.0",
            "isort>=5.9.0",
            "flake8>=3.9.0",
            "mypy>=0.910",
        ],
    },

    # Entry points for CLI tools
    entry_points={
        "console_scripts": [
            "cuetrack-track=cuetrack.cli:track_main",
        ],
    },

    # Metadata
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],

    keywords="tracking kalman-filter multi-object-tracking 3d augmented-reality",
)
