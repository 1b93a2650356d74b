"""
Data models for the Rinkan Monitor.

This module contains the data classes used throughout the application
for representing configuration, products, alerts and tick state.
"""

from .alert import FormattedAlert
from .config import Configuration, MonitorSettings, WatermarkPolicy
from .delivery import DeliveryResult
from .product import Product
from .tick import MonitorState, TickOutcome, TickResult

__all__ = [
    "Configuration",
    "MonitorSettings",
    "WatermarkPolicy",
    "Product",
    "FormattedAlert",
    "DeliveryResult",
    "MonitorState",
    "TickOutcome",
    "TickResult",
]
