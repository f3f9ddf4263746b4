"""News-catalyst signal pipeline with paper-trade simulation."""

__version__ = "0.1.0"

__all__ = ["__version__"]
