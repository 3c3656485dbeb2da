"""
Setup configuration for clickpredictor package.
"""

from setuptools import setup, find_packages

setup(
    name="clickpredictor",
    version="5.3.0",
    description="Landing page click prediction and wasted click attribution",
    packages=find_packages(include=["clickpredictor", "clickpredictor.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2.5",
        "numpy",
        "logfire",
        "python-dotenv",
        "PyYAML",
        "click",
        "tqdm",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "clickpredictor=clickpredictor.cli.main:cli",
        ],
    },
)
