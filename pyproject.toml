[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dabtool"
version = "0.2.0"
description = "Interactive command-line helper for managing apps and devices over adb"
requires-python = ">=3.10"
dependencies = [
    "termcolor",
]
keywords = ["android", "adb", "cli", "screenshot", "screen-recording", "permissions"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
dab = "dabtool.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["dabtool"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
