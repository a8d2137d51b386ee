"""cruxctl - deployment management for container nodes."""

__version__ = "0.4.0"
