[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "commonutils"
version = "0.1.0"
description = "Everyday building blocks: a bounded message queue, a thread pool, JSON access, asynchronous logging, SQLite helpers and a simple TCP client and server."
requires-python = ">=3.10"
dependencies = []
keywords = ["message queue", "thread pool", "logging", "sqlite", "tcp", "json"]
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
    "Topic :: Software Development :: Libraries",
    "Topic :: System :: Logging",
    "Topic :: Database",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["commonutils"]

[tool.pytest.ini_options]
addopts = "-ra"
