[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "idldecoder"
version = "0.1.1"
description = "Decode Anchor program instructions, accounts and events from an IDL file"
requires-python = ">=3.10"
dependencies = []
keywords = ["solana", "anchor", "idl", "borsh", "decoder", "base58"]
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
    "Environment :: Console",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
idldecoder = "idldecoder.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["idldecoder"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
