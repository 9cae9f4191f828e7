[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "taskrunner"
version = "0.1.0"
description = "Building blocks for a Taskfile-style task runner: argument parsing, shell execution, templating, output styles, up-to-date checks and task summaries"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "task",
    "task-runner",
    "build",
    "make",
    "automation",
    "taskfile",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
sleepit = "taskrunner.sleepit:main"

[tool.hatch.build.targets.wheel]
packages = ["taskrunner"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
