from setuptools import setup, find_packages

setup(
    name="postguard",
    version="0.1.0",
    packages=find_packages(include=["postguard", "postguard.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi",
        "pydantic",
        "pydantic-settings",
        "httpx",
        "uvicorn",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "respx",
        ],
    },
)
