[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "superchat"
version = "0.1.0"
description = "A small line-based chat server and terminal client with encrypted message delivery and SQLite user accounts"
requires-python = ">=3.10"
keywords = ["chat", "tcp", "asyncio", "sqlite", "aes-gcm", "bcrypt"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Framework :: AsyncIO",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Chat",
]
dependencies = [
    "cryptography",
    "bcrypt",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
superchat-server = "superchat.server:main"
superchat-client = "superchat.client:main"

[tool.hatch.build.targets.wheel]
packages = ["superchat"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
