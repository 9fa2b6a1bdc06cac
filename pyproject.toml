[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bbkmeasure"
version = "1.2.1"
description = "Broadband speed measurement logic: JSON values and parsing, speed and latency arithmetic, progress tracking and agent protocol helpers"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "broadband",
    "speed test",
    "latency",
    "bandwidth",
    "network measurement",
    "json",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Monitoring",
    "Topic :: Internet",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["bbkmeasure"]

[tool.hatch.build.targets.sdist]
include = ["bbkmeasure", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
