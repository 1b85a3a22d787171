from setuptools import setup, find_packages

setup(
    name="speechpractice",
    version="0.1.0",
    description="Speech therapy practice exercises with live loudness feedback",
    author="",
    python_requires=">=3.8",
    packages=find_packages(include=["speechpractice", "speechpractice.*"]),
    install_requires=[
        "pyaudio>=0.2.11",
        "numpy>=1.21.0",
        "rich>=12.5.0",
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
            "speechpractice=speechpractice.main:main",
        ],
    },
)
