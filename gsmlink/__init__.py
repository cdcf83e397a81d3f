"""AT command objects, a modem socket model and SimCom / u-blox socket managers."""

__version__ = "0.1.0"