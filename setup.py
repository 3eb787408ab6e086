# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

import os
import re

from setuptools import find_packages, setup


def read_version():
    path = os.path.join(os.path.dirname(__file__), "onnx_eval", "__init__.py")
    with open(path, encoding="utf-8") as f:
        match = re.search(r'^__version__ = "([^"]+)"', f.read(), re.MULTILINE)
    if match is None:
        raise RuntimeError("Unable to find __version__ in onnx_eval/__init__.py")
    return match.group(1)


setup(
    name="onnx-eval",
    version=read_version(),
    description="Eager numpy interpreter for ONNX computation graphs",
    author="Wahyu Ardiansyah",
    license="Apache-2.0",
    python_requires=">=3.9",
    packages=find_packages(include=["onnx_eval", "onnx_eval.*"]),
    install_requires=[
        "numpy>=1.20",
        "scipy>=1.7",
    ],
    extras_require={
        "onnx": ["onnx>=1.12"],
        "test": ["pytest>=7.0", "onnx>=1.12"],
    },
)
