from setuptools import (
    find_packages,
    setup,
)

setup(
    name="webgpu-headergen",
    version="0.1.0",
    description="Generate the webgpu.h C header from the WebGPU XML schema",
    packages=find_packages(exclude=["test", "test.*"]),
    python_requires=">=3.10",
    install_requires=[
        "click>=8.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "headergen=headergen:cli",
        ],
    },
)
