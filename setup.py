#!/usr/bin/env python3
# Copyright 2025 STA Client Contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
STA Python Client Setup
"""

import os

from setuptools import find_packages, setup

here = os.path.abspath(os.path.dirname(__file__))

# Read the README file
with open(os.path.join(here, "README.md"), encoding="utf-8") as fh:
    long_description = fh.read()

# Read requirements
with open(os.path.join(here, "requirements.txt"), encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

# Read version
version = "1.0.0"
init_path = os.path.join(here, "sta_client", "__init__.py")
if os.path.exists(init_path):
    with open(init_path, encoding="utf-8") as f:
        for line in f:
            if line.startswith("__version__"):
                version = line.split("=")[1].strip().strip('"').strip("'")
                break

setup(
    name="sta-client",
    version=version,
    author="STA Client Contributors",
    description="Python client for bulk Observation creation on OGC SensorThings API servers",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["sta_client", "sta_client.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: Scientific/Engineering :: GIS",
        "Topic :: Internet :: WWW/HTTP",
    ],
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "isort>=5.12.0",
            "flake8>=6.0.0",
            "mypy>=1.0.0",
        ],
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "sta-observations=sta_client.cli:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
    keywords="sensorthings, ogc, iot, observations, dataarray, sdk",
)
