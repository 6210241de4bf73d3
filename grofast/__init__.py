"""GROFAST — team management service and client SDK."""

__version__ = "1.0.0"
