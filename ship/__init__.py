"""Release pipeline for a notarized macOS desktop application."""

__version__ = "0.1.0"
