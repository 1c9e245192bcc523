[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cubeboot"
version = "0.1.0"
description = "Boot-loader support library: sector access, read-only FAT volumes, boot state packing and console pixel formats"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "fat",
    "fat12",
    "fat16",
    "fat32",
    "bootloader",
    "disk-image",
    "rgb565",
    "rgb5a3",
    "ycbcr",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Boot",
    "Topic :: System :: Filesystems",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pillow",
]

[tool.hatch.build.targets.wheel]
packages = ["cubeboot"]

[tool.hatch.build.targets.sdist]
include = [
    "cubeboot",
    "tests",
    "README.md",
    "pyproject.toml",
]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
