[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "netdisplays"
version = "0.97.0"
description = "Cast channel messages, framed TLS messaging and observable sink models for streaming to network displays"
requires-python = ">=3.10"
dependencies = []
keywords = ["cast", "protobuf", "network displays", "tls", "screencast"]
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
    "Topic :: Multimedia :: Video :: Display",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["netdisplays"]

[tool.pytest.ini_options]
addopts = "-ra"
