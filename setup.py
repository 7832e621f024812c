#!/usr/bin/env python3
"""
Setup script for wscount
"""

from setuptools import setup, find_packages

setup(
    name="wscount",
    version="0.0.1",
    description="WebSocket client that sends counted messages and logs inbound frames, plus a local echo endpoint",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "websockets>=15.0",
        "click>=8.1.7",
        "typer>=0.12.3",
        "rich>=13.9.2",
        "PyYAML>=6.0.1",
    ],
    extras_require={
        "test": [
            "pytest>=8.4.2",
            "pytest-asyncio>=1.2.0",
        ],
    },
    python_requires=">=3.10",
    entry_points={
        'console_scripts': [
            'wscount-server=server.server:main',
            'wscount-client=client.cli:main',
        ],
    },
)
