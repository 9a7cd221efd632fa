"""Setuptools build hooks for einlogic."""

from __future__ import annotations

from setuptools import find_packages, setup

# Pure Python modules plus the notation grammar; no compiled extensions, so
# the default ``bdist_wheel`` produces a ``py3-none-any`` wheel.
setup(
    name="einlogic",
    version="0.1.0",
    description="Named-index einsum engine over real, semiring and hypercomplex algebras",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_packages("src"),
    package_data={"einlogic.core": ["*.lark"]},
    include_package_data=True,
    install_requires=[
        "numpy>=1.22",
        "lark>=1.1",
    ],
    extras_require={
        "test": [
            "pytest>=7",
            "hypothesis>=6",
        ],
    },
)
