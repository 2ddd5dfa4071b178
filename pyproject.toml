[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "utilkit"
version = "0.1.0"
description = "Small building blocks for systems programs: containers, string helpers, logging, work queues, channels and argument parsing"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "utilities",
    "circular-buffer",
    "hashmap",
    "linked-list",
    "union-find",
    "workqueue",
    "serial",
    "unix-socket",
    "logging",
    "argument-parser",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["utilkit"]

[tool.hatch.build.targets.sdist]
include = ["utilkit", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
