"""Package the telemdecode state vector dump decoder."""

from setuptools import setup, find_packages

setup(
    name="telemdecode",
    version="0.1.0",
    description="Decode flight computer state vector dumps to CSV",
    package_dir={"": "python"},
    packages=find_packages("python"),
    python_requires=">=3.9",
    install_requires=[
        "numpy",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "telemdecode=telemdecode.cli:main",
        ],
    },
)
