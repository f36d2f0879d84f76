"""Azure DocumentDB vector search agent."""

__version__ = "0.1.0"
