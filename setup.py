"""
graphbr - setup

Copyright (c) 2024 Aiven Ltd
See LICENSE for details
"""
import setuptools


def _run():
    version_ns: dict = {}
    with open("graphbr/version.py") as version_file:
        exec(version_file.read(), version_ns)  # pylint: disable=exec-used

    setuptools.setup(
        name="graphbr",
        version=version_ns["__version__"],
        packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
        python_requires=">=3.11",
        install_requires=[
            "httpx",
            "msgspec",
            "paramiko",
            "pydantic",
            "PyYAML",
            "sentry-sdk",
        ],
        extras_require={
            "test": [
                "pytest",
                "pytest-mock",
                "respx",
            ],
        },
        dependency_links=[],
        package_data={},
        entry_points={
            "console_scripts": [
                "graphbr = graphbr.main:main",
            ],
        },
        author="Aiven",
        author_email="support@aiven.io",
        license="Apache 2.0",
        platforms=["POSIX", "MacOS"],
        description="graphbr - graph database cluster backup and restore",
        classifiers=[
            "Development Status :: 3 - Alpha",
            "Intended Audience :: Developers",
            "Intended Audience :: Information Technology",
            "Intended Audience :: System Administrators",
            "License :: OSI Approved :: Apache Software License",
            "Programming Language :: Python :: 3.11",
            "Programming Language :: Python :: 3.12",
            "Topic :: Database :: Database Engines/Servers",
            "Topic :: System :: Archiving :: Backup",
        ],
    )


if __name__ == '__main__':
    _run()
