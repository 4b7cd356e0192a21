"""Resume document editing engine."""

__version__ = "0.3.0"

__all__ = ["__version__"]
