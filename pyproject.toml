[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xaeroflux"
version = "0.1.0"
description = "Experimental event store with a write-ahead log, Merkle indexing and pluggable storage"
requires-python = ">=3.11"
dependencies = [
    "msgpack",
]
keywords = ["event-store", "merkle-tree", "write-ahead-log", "database", "experimental"]
classifiers = [
    "Development Status :: 2 - Pre-Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["xaeroflux"]

[tool.hatch.build.targets.sdist]
include = [
    "xaeroflux",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"
