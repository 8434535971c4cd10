[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kourier"
version = "0.1.0"
description = "Envoy xDS resource builders, configuration and a gRPC health probe for the Kourier ingress gateway"
requires-python = ">=3.10"
dependencies = [
    "grpcio",
]
keywords = ["envoy", "xds", "ingress", "gateway", "proxy", "health-check"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Proxy Servers",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
kourier = "kourier.health:main"

[tool.hatch.build.targets.wheel]
packages = ["kourier"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
