################################################################################
#
#  Copyright (C) 2021-2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

import setuptools


PACKAGE_NAME: str = "oasis_anemometer"

setuptools.setup(
    name=PACKAGE_NAME,
    version="0.1.0",
    author="Garrett Brown",
    maintainer="Garrett Brown",
    description="Signal processing core for an ultrasonic room anemometer",
    url="https://github.com/eigendude/OASIS",
    license="Apache-2.0",
    zip_safe=True,
    keywords=[
        "anemometer",
        "ultrasonic",
    ],
    classifiers=[
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Topic :: Scientific/Engineering",
        "Topic :: Scientific/Engineering :: Atmospheric Science",
        "Topic :: Scientific/Engineering :: Physics",
    ],
    python_requires=">=3.9",
    packages=setuptools.find_namespace_packages(include=[PACKAGE_NAME + "*"]),
    install_requires=[
        "numpy",
        "setuptools",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "anemometer_replay = oasis_anemometer.cli.replay_cli:main",
        ],
    },
)
