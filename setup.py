"""Setup configuration for the Weekly Decline Predictor package."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="weekly-decline-predictor",
    version="0.1.0",
    author="Aaron",
    author_email="aaron@example.com",
    description="Heuristic weekly decline prediction from price trend, news sentiment, volume and technical indicators",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/solvmanifold/LatentTrader",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Financial and Insurance Industry",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.9",
    install_requires=[
        "pandas>=2.0.0",
        "numpy>=1.24.0",
        "ta>=0.10.0",
        "typer>=0.9.0",
        "rich>=13.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "decline-predictor=decline_predictor.cli:app",
        ],
    },
)
