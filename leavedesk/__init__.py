"""Leave Desk — leave request lifecycle and balance accounting."""

__version__ = "1.0.0"
