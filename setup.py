from setuptools import setup, find_packages
import re

# Extract version from __init__.py
with open('little_owl/__init__.py', 'r') as f:
    version_match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]", f.read(), re.M)
    version = version_match.group(1) if version_match else '0.3.0'

setup(
    name="little-owl",
    version=version,
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "boto3>=1.26.0",
        "click>=8.0.3",
        "python-dotenv>=0.19.0",
        "rich>=12.0.0",
    ],
    extras_require={
        'dev': [
            'pytest>=7.0.0',
            'flake8>=4.0.0',
            'black>=22.0.0',
        ],
    },
    entry_points={
        "console_scripts": [
            "little-owl=little_owl.cli:main",
        ],
    },
    description="A command line client for Amazon Athena that streams paginated query results",
    keywords="athena, aws, sql, cli, csv",
    python_requires=">=3.7",
)
