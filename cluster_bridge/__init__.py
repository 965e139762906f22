"""Cross-cluster connectivity bootstrap for multi-cluster kind environments."""

__version__ = "0.1.0"
