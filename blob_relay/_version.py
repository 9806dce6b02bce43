"""Version information for blob-relay."""

__version__ = "1.0.0"
