# noqa: D100
from setuptools import find_packages, setup

__version__ = None
with open("dbmatic/__version__.py", "r") as fh:
    exec(fh.readlines()[1])
assert __version__, "setup.py: Failed to extract version from dbmatic/__version__.py"

install_requires = []
tests_require = []
extras_require = {}

with open("requirements.txt", "r") as fh:
    for line in fh.read().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        requirement, _, marker = line.partition("#")
        requirement, marker = requirement.strip(), marker.strip()
        if marker == "test":
            tests_require.append(requirement)
        elif marker.startswith("extra:"):
            extras_require.setdefault(marker[len("extra:") :], []).append(requirement)
        else:
            install_requires.append(requirement)

extras_require["tests"] = tests_require
extras_require["all"] = sorted({r for name, reqs in extras_require.items() if name != "tests" for r in reqs})

with open("README.rst", "r") as fh:
    long_description = fh.read()

setup(
    name="dbmatic",
    version=__version__,
    packages=find_packages(exclude=["tests", "tests.*"]),
    description="Database agnostic DDL, introspection and type mapping for async database drivers",
    long_description=long_description,
    long_description_content_type="text/x-rst",
    license="ISC License",
    test_suite="tests",
    install_requires=install_requires,
    tests_require=tests_require,
    python_requires=">=3.9.0",
    extras_require=extras_require,
    classifiers=[
        "Topic :: Database",
        "Development Status :: 4 - Beta",
        "Framework :: AsyncIO",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
