"""Product catalog service: HTTP API, cache-aside reads and background image processing."""

__version__ = "1.0.0"
