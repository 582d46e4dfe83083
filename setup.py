from setuptools import setup, find_packages

setup(
    name="av1convert",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "ffmpeg-python",
        "rich>=13.0.0",  # Explicit minimum version
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-mock",
        ],
    },
    entry_points={
        "console_scripts": [
            "av1convert=av1convert.__main__:main",
        ],
    },
    python_requires=">=3.8",
)
