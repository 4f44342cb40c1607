"""Setup configuration for enzyplate package."""

from setuptools import setup, find_packages

setup(
    name="enzyplate",
    version="0.1.0",
    description="Kinetic analysis of 96-well enzyme assay plates (tPA, plasmin generation, fibrinolysis)",
    author="Dan Olson",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pandas>=1.3.0",
        "numpy>=1.20.0",
        "plotly>=5.0.0",
        "scipy>=1.7.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
)
