"""threadwarden: one support thread per user in a shared community channel."""

__version__ = "1.0.0"
