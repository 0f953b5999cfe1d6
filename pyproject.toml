[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "jabukod"
version = "0.1.0"
description = "Code generation back end for the Jabukod language: syntax tree, node data and x86-64 GNU assembly output"
requires-python = ">=3.10"
dependencies = []
keywords = ["compiler", "code generation", "x86-64", "assembly", "abstract syntax tree"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Programming Language :: Assembly",
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["jabukod"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
