"""
Alert formatting component for the Rinkan Monitor.

This module turns products into Discord webhook embeds.
"""

from typing import Any, Dict, List

from ..models.alert import FormattedAlert
from ..models.product import Product

PRODUCT_PAGE_BASE_URL = "https://rinkan-online.com/products"
CURRENCY_PREFIX = "¥"


class AlertFormatter:
    """Formats products into Discord embed payloads."""

    def __init__(self, product_base_url: str = PRODUCT_PAGE_BASE_URL):
        """
        Initialize the alert formatter.

        Args:
            product_base_url: Base URL of the product detail pages
        """
        self.product_base_url = product_base_url.rstrip("/")

    def product_url(self, product: Product) -> str:
        return f"{self.product_base_url}/{product.product_code}"

    def format_alert(self, product: Product) -> FormattedAlert:
        """
        Format a product as a Discord embed.

        Args:
            product: Product to announce

        Returns:
            FormattedAlert: Alert ready for delivery
        """
        title = f"{product.brand_name} - {product.product_name}"
        # Discord rejects embed titles over 256 characters
        if len(title) > 256:
            title = title[:253] + "..."

        url = self.product_url(product)

        fields: List[Dict[str, Any]] = [
            {"name": "Size", "value": product.size},
            {"name": "Product Condition", "value": product.product_condition},
            {"name": "Price", "value": f"{CURRENCY_PREFIX}{product.price}"},
        ]

        embed: Dict[str, Any] = {
            "title": title,
            "url": url,
            "fields": fields,
        }

        if product.thumbnail_url:
            embed["thumbnail"] = {"url": product.thumbnail_url}

        alert = FormattedAlert(title=title, url=url, payload={"embeds": [embed]})
        alert.validate()
        return alert
