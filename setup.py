from setuptools import setup, find_namespace_packages

setup(
    name="streetpaws",
    version="0.1.0",
    description="Incident analytics for the StreetPaws stray-animal reporting portal: hotspot detection, forecasting and resource planning",
    packages=find_namespace_packages(include=["streetpaws", "streetpaws.*"]),
    python_requires=">=3.10",
    install_requires=[
        "scikit-learn>=1.3.0",
        "pandas>=2.0.0",
        "numpy>=1.24.0",
        "fastapi>=0.100.0",
        "uvicorn>=0.23.0",
        "pydantic>=2.0.0",
        "python-dateutil>=2.8.0",
        "python-dotenv>=1.0.0",
        "click>=8.1.0",
        "rich>=13.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "httpx>=0.24.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "streetpaws=streetpaws.cli:main",
        ],
    },
)
