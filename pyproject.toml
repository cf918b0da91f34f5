[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bitemap"
version = "0.1.0"
description = "In-memory map of bites and nested height contours, with a command interpreter and performance tester"
requires-python = ">=3.10"
dependencies = []
keywords = ["contours", "map", "data structures", "command interpreter", "performance"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: GIS",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
bitemap = "bitemap.interpreter:main"

[tool.hatch.build.targets.wheel]
packages = ["bitemap"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
