"""
Setup file.
"""

import os

from setuptools import find_packages, setup

KEYWORDS = "ikvm ikvmc java dotnet mono dll build cross-compiler"
HERE = os.path.dirname(os.path.abspath(__file__))

with open(os.path.join(HERE, "src", "ikvmbuild", "__init__.py"), encoding="utf-8") as f:
    VERSION = next(
        line.split("=")[1].strip().strip('"')
        for line in f
        if line.startswith("__version__")
    )


if __name__ == "__main__":
    setup(
        name="ikvmbuild",
        version=VERSION,
        description="Build a .NET DLL from resolved Java dependencies with IKVM",
        keywords=KEYWORDS,
        python_requires=">=3.8",
        package_dir={"": "src"},
        packages=find_packages("src"),
        install_requires=["tqdm>=4.0"],
        extras_require={"test": ["pytest>=7.0"]},
        entry_points={"console_scripts": ["ikvmbuild=ikvmbuild.cli:main"]},
        include_package_data=True)
