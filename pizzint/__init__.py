"""PIZZINT tracker -- periodic pizza-index collector with spike detection."""

__version__ = "0.1.0"
