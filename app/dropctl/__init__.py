"""dropctl - soft-delete files into a recoverable holding directory."""

__version__ = "0.1.0"
