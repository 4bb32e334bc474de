"""Setup script for ccoptimizer."""

from setuptools import setup, find_packages

setup(
    name="ccoptimizer",
    version="1.0.0",
    description="Claude API cost optimization toolkit with a local response cache",
    python_requires=">=3.11",
    packages=find_packages(include=["ccoptimizer", "ccoptimizer.*"]),
    install_requires=[
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "anyio>=4.0",
        "python-dotenv>=1.0",
        "click>=8.1",
        "rich>=13.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-benchmark>=4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "ccoptimizer=ccoptimizer.interfaces.cli:main",
        ],
    },
)
