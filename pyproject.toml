[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "layeredfs"
version = "0.1.0"
description = "Filesystem operation layers over a backing directory: hex-to-image views, chunked storage, name and content filtering, and per-area encodings."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "filesystem",
    "fuse",
    "virtual-filesystem",
    "chunking",
    "rot13",
    "compression",
    "overlay",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Filesystems",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["layeredfs"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
