#!/usr/bin/env python3
"""Setup script for MindMapX."""

from setuptools import setup, find_packages

setup(
    name="mindmapx",
    version="1.0.0",
    description="Interactive idea-tree editor with suggestions and PNG/JSON export",
    author="MindMapX Project",
    license="MIT",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "PyGObject>=3.46.0",
        "pycairo>=1.25.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "mindmapx=mindmapx.launcher:main",
        ],
        "gui_scripts": [
            "mindmapx-gui=mindmapx.launcher:main",
        ],
    },
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Environment :: X11 Applications :: GTK",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Topic :: Office/Business",
    ],
)
