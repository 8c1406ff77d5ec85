from setuptools import setup, find_packages

setup(
    name="pipeline-cli",
    version="0.1.0",
    packages=find_packages(exclude=["tests*"]),
    install_requires=[
        "kubernetes>=28.1.0",
        "PyYAML>=6.0",
        "click>=8.1.0",
        "rich>=13.7.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pipeline-cli=pipeline_cli.cli:cli",
        ],
    },
    author="Your Name",
    description="pipeline-cli - Build, containerize, scan and deploy web and Java applications",
    python_requires=">=3.8",
)
