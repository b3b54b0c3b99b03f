"""NetTap comparison and lead API."""

__version__ = "1.0.0"
