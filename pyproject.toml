[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "magistrate"
version = "1.0.0"
description = "Two-way serialization of Python objects into compact byte buffers and files"
requires-python = ">=3.10"
keywords = ["serialization", "checkpoint", "pack", "unpack", "buffer", "traversal"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
magistrate-examples = "magistrate.examples:main"

[tool.hatch.build.targets.wheel]
packages = ["magistrate"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
