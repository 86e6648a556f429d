"""KZ speedrun statistics API."""

__version__ = "0.1.0"
