"""Setup script for Analysis Ledger"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
this_directory = Path(__file__).parent
long_description = ""
readme_path = this_directory / "README.md"
if readme_path.exists():
    long_description = readme_path.read_text(encoding="utf-8")

setup(
    name="analysis-ledger",
    version="0.1.0",
    description="Persistence and workflow core for code-analysis runs and compliance violations",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Quality Assurance",
        "Topic :: Database",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.22.0",
        "rich>=13.0.0",
        "typer>=0.9.0",
        "click>=8.0.0",
        "tomli>=2.0.0; python_version<'3.11'",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "analysis-ledger=analysis_ledger.cli:main",
        ],
    },
    keywords="code-analysis compliance violations sqlite repository latency",
)
