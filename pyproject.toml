[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gotemplate-server"
version = "0.1.0"
description = "Server scaffolding: configuration, readiness checks, routing, OpenAPI spec and schema generation helpers"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["server", "routing", "openapi", "configuration", "readiness", "graphql", "json-schema"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Typing :: Typed",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["gotemplate_server"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
