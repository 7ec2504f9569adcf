"""Setup script for collects."""
from pathlib import Path

from setuptools import find_packages, setup


README = Path(__file__).parent / "README.md"


setup(
    name="collects",
    version="0.1.0",
    description=(
        "Collect arbitrary sequences into containers of a requested type."
    ),
    long_description=README.read_text() if README.exists() else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["collects", "collects.*"]),
    python_requires=">=3.11",
    install_requires=[
        "numpy>=2",
        "pandas",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
