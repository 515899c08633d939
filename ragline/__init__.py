"""ragline: retrieval-augmented answer service."""

__version__ = "0.1.0"
