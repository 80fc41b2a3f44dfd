"""
Setup file.
"""

import os

from setuptools import find_packages, setup

URL = "https://github.com/jarforge/jarforge"
KEYWORDS = "java kotlin jar build incremental javac native-image graalvm"
HERE = os.path.dirname(os.path.abspath(__file__))


def read_version() -> str:
    with open(os.path.join(HERE, "src", "jarforge", "__init__.py"), encoding="utf-8") as f:
        for line in f:
            if line.startswith("__version__"):
                return line.split("=")[1].strip().strip('"')
    raise RuntimeError("version not found")


if __name__ == "__main__":
    setup(
        name="jarforge",
        version=read_version(),
        description="Incremental jar builder for single-file Java and Kotlin programs",
        keywords=KEYWORDS,
        url=URL,
        python_requires=">=3.10",
        package_dir={"": "src"},
        packages=find_packages(where="src"),
        package_data={"jarforge.templates": ["*.tmpl"]},
        include_package_data=True,
        install_requires=["psutil"],
        entry_points={"console_scripts": ["jarforge=jarforge.cli:main"]},
        extras_require={"test": ["pytest"]})
