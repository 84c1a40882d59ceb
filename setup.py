from setuptools import find_namespace_packages, setup

setup(
    name="nibe_stats",
    version="0.1.0",
    description="A daemon that records NIBE Uplink heat pump readings",
    author="Your Name",
    author_email="your.email@example.com",
    packages=find_namespace_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "httpx>=0.24.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "python-dotenv>=1.0.0",
        "influxdb-client[async]>=1.36.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "nibe-stats=nibe_stats.entrypoints.daemon:run",
        ],
    },
    python_requires=">=3.10",
)
