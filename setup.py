#!/usr/bin/env python
"""
Setup script for frontdesk-router package.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README file
this_directory = Path(__file__).parent
readme_file = this_directory / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

# Read version from package
version_file = this_directory / "frontdesk_router" / "__version__.py"
version = {}
if version_file.exists():
    exec(version_file.read_text(), version)
    VERSION = version.get("__version__", "0.1.0")
else:
    VERSION = "0.1.0"

setup(
    name="frontdesk-router",
    version=VERSION,
    description="Skill routing and escalation engine for AI front-desk agents",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Front Desk Router Team",
    author_email="support@frontdesk-router.io",
    url="https://github.com/frontdesk-router/frontdesk-router",
    project_urls={
        "Bug Tracker": "https://github.com/frontdesk-router/frontdesk-router/issues",
        "Source Code": "https://github.com/frontdesk-router/frontdesk-router",
    },
    license="MIT",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: Healthcare Industry",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Communications :: Telephony",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Typing :: Typed",
    ],
    keywords=[
        "routing",
        "escalation",
        "skills",
        "ivr",
        "sms",
        "voice",
        "telephony",
        "receptionist",
        "ai",
    ],
    packages=find_packages(exclude=["tests*", "docs*"]),
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2.8.0",
        "httpx>=0.27.0",
        "python-dotenv>=1.0.0",
        "typer>=0.9.0",
        "rich>=13.7.0",
        "pydantic-settings>=2.4.0",
        "pyyaml>=6.0",
        "jinja2>=3.1.6",
        "tzdata>=2024.1",
    ],
    extras_require={
        "dev": [
            "pytest>=8.0.0",
            "pytest-asyncio>=0.24.0",
            "pytest-cov>=5.0.0",
            "black>=24.0.0",
            "ruff>=0.6.0",
            "mypy>=1.11.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "frontdesk-router=frontdesk_router.cli.main:main",
        ],
    },
    include_package_data=True,
    package_data={
        "frontdesk_router": [
            "templates/**/*",
            "templates/catalogues/*.yaml",
        ],
    },
    zip_safe=False,
)
