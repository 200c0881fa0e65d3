"""Quote fetching with bounded caching and synthetic fallback."""

__version__ = "0.1.0"
