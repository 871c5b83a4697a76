from pathlib import Path
from setuptools import setup, find_packages

PROJECT_ROOT = Path(__file__).parent.resolve()
README = PROJECT_ROOT / "README.md"

setup(
    name="emr-spark",
    version="0.3.0",
    description="Launch AWS EMR clusters and run Spark jobs on them.",
    long_description=README.read_text(encoding="utf-8") if README.exists() else "",
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=[
        "boto3",
        "botocore",
        "pydantic>=2",
        "PyYAML",
        "rich",
        "typer",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "emr-spark=emr_spark.cli:main",
        ],
    },
)
