"""
Setup script for http-source
"""

from setuptools import setup, find_packages
import pathlib

# Read the README file
HERE = pathlib.Path(__file__).parent
README = (HERE / "README.md").read_text(encoding="utf-8")

setup(
    name="http-source",
    version="1.0.0",
    description="HTTP ingress that republishes request bodies on an outbound message channel",
    long_description=README,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["http_source", "http_source.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "fastapi>=0.115.12",
        "httpx>=0.27.0",
        "pika>=1.3.2",
        "pydantic>=2.11.5",
        "pydantic-settings>=2.12.0",
        "structlog>=24.1.0",
        "uvicorn>=0.34.3",
    ],
    extras_require={
        "test": [
            "pytest>=8.0.0",
            "pytest-asyncio>=0.23.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "http-source=http_source.interfaces.http.rest:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
        "License :: OSI Approved :: MIT License",
    ],
    keywords="http ingress messaging rabbitmq stream source",
)
