"""Generate getter and setter functions for Go struct types."""

__version__ = "0.1.0"
