from setuptools import setup, find_packages

setup(
    name="lww-dict",
    version="0.1.0",
    description="Last-Write-Wins Element Dictionary CRDT",
    author="adamfilli",
    packages=find_packages(include=["lwwdict", "lwwdict.*"]),
    install_requires=[
        "pandas",
    ],
    extras_require={
        "test": ["pytest"],
    },
    include_package_data=True,
    python_requires=">=3.11",
)
