"""Build a Shopify theme and mirror it into a distribution repository."""

__version__ = "0.1.0"

__all__ = ["__version__"]
