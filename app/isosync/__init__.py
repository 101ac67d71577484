"""isosync - keep an ISO manifest in sync with what is on disk."""

__version__ = "0.1.0"
