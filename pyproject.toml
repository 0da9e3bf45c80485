[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "handykit"
version = "0.1.0"
description = "Small networking toolkit: byte buffers, slices, IPv4 addresses, a rotating logger, a thread pool, length-prefixed protobuf framing and two selector-loop demo servers"
requires-python = ">=3.10"
dependencies = [
    "protobuf",
]
keywords = ["networking", "buffer", "logging", "thread-pool", "protobuf", "selectors"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
handykit-http = "handykit.raw_http:main"
handykit-echo = "handykit.raw_echo:main"

[tool.hatch.build.targets.wheel]
packages = ["handykit"]

[tool.pytest.ini_options]
addopts = "-ra"
