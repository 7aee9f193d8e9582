#!/usr/bin/env python

import setuptools

name = 'hobbot'
description = 'Event-driven IRC bot framework'

params = dict(
    name=name,
    version='1.0.0',
    description=description,
    packages=setuptools.find_packages(exclude=['*.tests']),
    package_data={name: ['codes.txt']},
    python_requires='>=3.10',
    install_requires=[
        'jaraco.collections',
        'jaraco.text>=3.10',
        'jaraco.logging',
        'jaraco.functools>=1.20',
        'jaraco.stream',
        'more_itertools',
        'importlib_resources; python_version < "3.12"',
    ],
    extras_require={
        'testing': [
            'pytest>=6',
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Topic :: Communications :: Chat :: Internet Relay Chat",
    ],
    entry_points={
        'console_scripts': [
            'hobbot = hobbot.cli:main',
        ],
    },
)
if __name__ == '__main__':
    setuptools.setup(**params)
