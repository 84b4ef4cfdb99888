"""Setup configuration for convert-cache."""

from setuptools import find_packages, setup

setup(
    name="convert-cache",
    version="0.1.0",
    description="Content-addressed cache for expensive build asset transforms",
    python_requires=">=3.11",
    packages=find_packages(where="src", include=["convertcache*"]),
    package_dir={"": "src"},
    install_requires=[
        "pydantic>=2.6.0",
        "pydantic-settings>=2.1.0",
    ],
    extras_require={
        "dev": [
            "pytest>=8.0.0",
            "pytest-asyncio>=0.23.0",
            "pytest-mock>=3.12.0",
        ],
    },
)
