"""hostbridge: launches an embedded program inside a fresh runtime namespace."""

__version__ = "0.1.0"
