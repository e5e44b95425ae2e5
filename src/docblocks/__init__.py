"""docblocks: keep documentation examples in sync with tagged source blocks."""

__version__ = "0.2.0"

__all__ = ["__version__"]
