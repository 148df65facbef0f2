[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pricecheck"
version = "0.1.0"
description = "Compare supermarket grocery prices across nearby stores from a local SQLite price database"
requires-python = ">=3.10"
dependencies = [
    "flask",
]
keywords = [
    "supermarket",
    "grocery",
    "prices",
    "shopping-list",
    "sqlite",
    "full-text-search",
    "semantic-search",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
    "Topic :: Office/Business",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
pricecheck = "pricecheck.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["pricecheck"]

[tool.hatch.build.targets.sdist]
include = [
    "pricecheck",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"
