[build-system]
requires = ["setuptools>=61"]
build-backend = "setuptools.build_meta"

[project]
name = "minzip"
version = "0.1.0"
description = "Small zip central-directory reader with byte helpers, file mapping, an open-addressing hash table and a run-length bitmap font codec"
requires-python = ">=3.10"
dependencies = []
keywords = ["zip", "archive", "central directory", "mmap", "hash table", "font", "run-length"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Archiving :: Compression",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.setuptools]
packages = ["minzip"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
