"""TaskFlow: console task dashboard with AI productivity insights."""

__version__ = "0.1.0"
