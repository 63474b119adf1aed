[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "recraft"
version = "0.1.0"
description = "Console server list, status polling, login and NBT storage for a classic block-game multiplayer client"
requires-python = ">=3.10"
dependencies = []
keywords = ["nbt", "server-list", "server-status", "protocol", "client"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
recraft = "recraft.app:main"

[tool.hatch.build.targets.wheel]
packages = ["recraft"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
