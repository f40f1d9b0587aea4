"""vortia - content generation and social publishing API."""

__version__ = "0.1.0"
