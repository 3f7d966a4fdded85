"""Student roster: add, list and search students, with a light/dark theme."""

__version__ = "0.1.0"
