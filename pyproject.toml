[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sysevent-kit"
version = "0.1.0"
description = "Read system event records and route events, queries and watchers through a pluggable event service"
requires-python = ">=3.10"
dependencies = []
keywords = ["system events", "event records", "logging", "listeners", "query", "json"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Logging",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["sysevent_kit"]

[tool.pytest.ini_options]
addopts = "-ra"
