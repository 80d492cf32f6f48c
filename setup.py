from setuptools import setup, find_packages

setup(
    name="lipsample",
    version="0.1.0",
    description="Exact random variates from Lipschitz continuous densities by envelope rejection",
    author="adamfilli",
    packages=find_packages(include=["lipsample", "lipsample.*"]),
    install_requires=[
        "pandas",
    ],
    extras_require={
        "test": [
            "pytest",
            "matplotlib",
        ],
    },
    include_package_data=True,
    python_requires=">=3.11",
)
