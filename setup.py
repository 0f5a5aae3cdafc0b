"""Setup configuration for ES Writer."""

from setuptools import find_packages, setup

setup(
    name="es-writer",
    version="0.1.0",
    description="Answers application form questions from a stored user profile",
    python_requires=">=3.11",
    packages=find_packages(where="src", include=["eswriter*"]),
    package_dir={"": "src"},
    install_requires=[
        "httpx>=0.27.0",
        "pydantic>=2.6.0",
        "pydantic-settings>=2.1.0",
        "fastapi>=0.110.0",
        "uvicorn>=0.29.0",
        "beautifulsoup4>=4.12.0",
    ],
    entry_points={
        "console_scripts": [
            "eswriter=eswriter.cli:cli_entry",
        ],
    },
    extras_require={
        "dev": [
            "pytest>=8.0.0",
            "pytest-asyncio>=0.23.0",
            "pytest-mock>=3.12.0",
            "respx>=0.21.0",
        ],
    },
)
