[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gsmlink"
version = "0.1.0"
description = "AT command builders, a socket state machine and SimCom / u-blox socket managers for cellular modems"
requires-python = ">=3.10"
dependencies = []
keywords = ["gsm", "modem", "at-commands", "sockets", "simcom", "ublox"]
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
    "Topic :: Communications :: Telephony",
    "Topic :: Software Development :: Embedded Systems",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["gsmlink"]

[tool.pytest.ini_options]
addopts = "-ra"
