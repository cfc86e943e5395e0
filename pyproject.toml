[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "datauri"
version = "1.0.0"
description = "Parse and generate RFC 2397 data URIs"
requires-python = ">=3.10"
dependencies = []
keywords = ["data-uri", "dataurl", "rfc2397", "base64", "uri"]
classifiers = [
    "Development Status :: 5 - Production/Stable",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: Internet :: WWW/HTTP",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
datauri = "datauri.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["datauri"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
