"""HTTP service exposing palette extraction."""

__version__ = "0.1.0"
