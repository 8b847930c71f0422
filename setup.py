"""Build the tranx2 package."""

from setuptools import setup

setup(
    name="tranx2",
    version="0.1.0",
    description="TranX-2 transponder loop protocol decoder and tooling",
    python_requires=">=3.9",
    package_dir={"": "python"},
    packages=["tranx2"],
    install_requires=[
        "pyserial>=3.5",
        "numpy>=1.22",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "tranx2=tranx2.cli:main",
        ],
    },
)
