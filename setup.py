"""
Setup script for the neonbit-simulator package.

This script uses setuptools to package and distribute neonbit, a simulator
of a single 7-segment display driven by a 7-bit signal register. It defines
metadata, dependencies, and the entry point for the simulator's
command-line interface.
"""
import os
import re
from setuptools import find_packages, setup


def get_version_from_init():
    """Reads the __version__ string from neonbit/__init__.py."""
    init_py_path = os.path.join(
        os.path.dirname(__file__), "neonbit", "__init__.py"
    )
    try:
        with open(init_py_path, "r", encoding="utf-8") as f_version:
            version_file_content = f_version.read()
        version_match = re.search(
            r"^__version__\s*=\s*['\"]([^'\"]*)['\"]",
            version_file_content,
            re.M,
        )
        if version_match:
            return version_match.group(1)
        raise RuntimeError(
            f"Unable to find __version__ string in {init_py_path}."
        )
    except FileNotFoundError as exc:
        raise RuntimeError(
            f"{init_py_path} not found. Ensure you are in the correct "
            f"directory."
        ) from exc


try:
    with open("README.md", "r", encoding="utf-8") as f_readme:
        long_description = f_readme.read()
except FileNotFoundError:
    long_description = "Simulator for a 7-segment display driven by a 7-bit register."


setup(
    name="neonbit-simulator",
    version=get_version_from_init(),
    description="7-segment display simulator with console dashboard and HTTP API.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(where=".", exclude=("tests", "tests.*", "examples")),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Operating System :: POSIX",
        "Topic :: Education",
        "Topic :: System :: Emulators",
    ],
    python_requires=">=3.8",
    install_requires=[
        "click>=7.0",  # For the CLI
        "rich>=10.0.0",  # For the rich console dashboard
        "fastapi>=0.68.0",  # For the HTTP API
        "uvicorn>=0.15.0",  # For running the FastAPI server
        "pydantic>=1.8",  # Request payload models
        "requests>=2.25",  # For the SDK client
    ],
    extras_require={
        "dev": [
            "pytest>=6.0",
            "pytest-asyncio>=0.15",
            "pytest-mock>=3.0",
            "httpx>=0.23",  # Required by fastapi.testclient
            "flake8>=3.9",
            "black>=21.0",
            "mypy>=0.900",
        ],
    },
    entry_points={
        "console_scripts": [
            "neonbit_simulator=neonbit.main:main",
            "neonbit-simulator=neonbit.main:main",
        ],
    },
    keywords="7-segment display simulator digital logic education asyncio",
)
