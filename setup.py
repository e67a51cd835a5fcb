"""Setup script for the payments demo service."""

from setuptools import setup, find_packages

setup(
    name="payments-service",
    version="1.0.0",
    description="Payments demo API instrumented with OpenTelemetry, structlog and Prometheus",
    author="Payments Platform Team",
    python_requires=">=3.9",
    packages=find_packages(include=["payments_service", "payments_service.*"]),
    install_requires=[
        line.strip()
        for line in open("requirements.txt")
        if line.strip() and not line.startswith("#") and not line.startswith("git+")
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.23.0",
            "httpx>=0.27.0",
        ],
        "load": [
            "locust>=2.20.0",
        ],
        "dev": [
            "black>=23.0.0",
            "isort>=5.12.0",
            "flake8>=6.0.0",
            "mypy>=1.4.0",
            "pytest-cov>=4.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "payments-service=payments_service.api.main:main",
            "payments-traffic=payments_service.traffic:main",
        ]
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Framework :: FastAPI",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
