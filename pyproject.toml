[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "influxwrite"
version = "2.14.0"
description = "Batched line-protocol writing for InfluxDB 2 with a bounded retry queue, exponential backoff and gzip support"
requires-python = ">=3.10"
dependencies = []
keywords = ["influxdb", "time-series", "line-protocol", "write", "retry", "batching"]
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
    "Topic :: Database :: Front-Ends",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["influxwrite"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
