"""storagemeter - application storage usage by category."""

__version__ = "0.1.0"
