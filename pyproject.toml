[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "txnbatch"
version = "0.1.0"
description = "Daily batch processing of bank transactions: validation, posting, fraud alerts and account summaries"
requires-python = ">=3.10"
dependencies = []
keywords = ["banking", "transactions", "batch", "csv", "fraud", "accounting"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Accounting",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
txnbatch = "txnbatch.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["txnbatch"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
