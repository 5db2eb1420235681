"""Setup script for the Block Sudoku rules engine."""
from setuptools import setup, find_packages

setup(
    name="block-sudoku-engine",
    version="1.0.0",
    description="Block Sudoku rules engine with a Gymnasium environment",
    author="Block Sudoku Team",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.24.0",
        "gymnasium>=0.29.0",
        "tqdm>=4.65.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.0.0",
        ],
    },
)
