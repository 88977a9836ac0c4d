#!/usr/bin/env python3
"""
Setup script for CephFS Provisioner.
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

packages = find_packages(where=".", include=["cephfs_provisioner", "cephfs_provisioner.*"])

setup(
    name="cephfs-provisioner",
    version="0.1.0",
    author="CephFS Provisioner Project",
    description="Dynamic CephFS volume provisioner for Kubernetes",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="Apache-2.0",
    packages=packages,
    package_dir={"": "."},
    include_package_data=True,
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest>=7.0",
            "httpx>=0.24",
        ],
    },
    entry_points={
        "console_scripts": [
            "cephfs-provisioner=cephfs_provisioner.cli.cli:main",
            "cephfs-provisioner-api=cephfs_provisioner.api.server:main",
        ],
        "oslo.config.opts": [
            "cephfs_provisioner=cephfs_provisioner.provisioner.configuration:list_opts",
        ],
    },
)
