#!/usr/bin/env python3

import re
import sys

import setuptools
import toml

"""

THIS IS HACKY setup.py FOR DEVELOPMENT ONLY. It is NOT recommended to use it and is not guaranteed to work.
For interactive installs, consider one of the alternatives:
1. poetry install
2. pip install -e .

"""

if __name__ == "__main__":
    major, minor = sys.version_info.major, sys.version_info.minor
    with open("pyproject.toml", "r") as f:
        toml_data = toml.load(f)

    install_requires = []
    if "tool" in toml_data and "poetry" in toml_data["tool"]:
        parse_requires = toml_data["tool"]["poetry"].get("dependencies", {})
        for key, value in parse_requires.items():
            if key in ["python"]:
                continue
            if isinstance(value, list):
                version = [v["version"] for v in value if f"{major}.{minor}" in v["python"]]
                if len(version) == 0:
                    version = [v["version"] for v in value if f"{major}.{minor-1}" in v["python"]]
                version = version[0]
            elif isinstance(value, dict):
                if value.get("optional", False):
                    continue
                version = value["version"]
            else:
                version = value

            install_requires.append(f'{key}{version.replace("^", ">=")}')

        extras_require = {
            extra: list(packages)
            for extra, packages in toml_data["tool"]["poetry"].get("extras", {}).items()
        }

        name = re.sub(r"[^A-Za-z0-9.]+", "-", toml_data["tool"]["poetry"]["name"])
        version = toml_data["tool"]["poetry"]["version"]

    setuptools.setup(
        name=name,
        version=version,
        packages=setuptools.find_packages(exclude=["tests"]),
        install_requires=install_requires,
        extras_require=extras_require,
    )
