"""EventFinder: nearby event discovery by category."""

__version__ = "0.1.0"
