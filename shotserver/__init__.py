"""Single-process HTTP server for the latest screenshot in a directory."""

__version__ = "0.1.0"
