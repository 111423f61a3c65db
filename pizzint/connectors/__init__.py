"""Upstream data source connectors.

Re-exports the BaseConnector ABC and the pizzint.watch connector.
"""

from .base import BaseConnector
from .pizzint_api import PizzintConnector

__all__ = [
    "BaseConnector",
    "PizzintConnector",
]
