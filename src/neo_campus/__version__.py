"""Version information for neo-campus."""

__version__ = "0.1.0"
