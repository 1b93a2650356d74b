"""
Protocol interfaces for the Rinkan Monitor.

This module defines the protocol interfaces that establish system
boundaries and enable dependency injection in the orchestrator.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional, Protocol

from .models.alert import FormattedAlert
from .models.delivery import DeliveryResult
from .models.product import Product

if TYPE_CHECKING:
    from .components.product_poller import PollResult


class IProductPoller(Protocol):
    """Protocol for search API polling components."""

    def collect_new_products(self, watermark: Optional[datetime]) -> "PollResult":
        """Collect products created after the watermark."""
        ...


class IProductFilter(Protocol):
    """Protocol for local product filtering."""

    def matches(self, product: Product) -> bool:
        """Check whether a product should be announced."""
        ...


class IAlertFormatter(Protocol):
    """Protocol for alert formatting."""

    def format_alert(self, product: Product) -> FormattedAlert:
        """Format a product into an alert message."""
        ...


class IMessageDispatcher(Protocol):
    """Protocol for message delivery."""

    def send_alert(self, alert: FormattedAlert) -> DeliveryResult:
        """Send an alert through the messaging platform."""
        ...

