from setuptools import setup, find_packages

setup(
    name="meditrack",
    version="0.1.0",
    description="Personal meditation tracker with streaks and session statistics",
    author="",
    python_requires=">=3.8",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "rich>=12.5.0",
        "pydantic>=2.0.0",
        "pyyaml>=6.0.0",
        "pypubsub>=4.0.3",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "meditrack=meditrack.main:main",
        ],
    },
)
