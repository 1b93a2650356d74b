"""
Unit tests for the alert formatter component.
"""

from rinkan_monitor.components.alert_formatter import (
    PRODUCT_PAGE_BASE_URL,
    AlertFormatter,
)
from rinkan_monitor.models.alert import FormattedAlert

from conftest import make_product


class TestAlertFormatter:
    """Test cases for AlertFormatter."""

    def setup_method(self):
        """Set up test fixtures."""
        self.formatter = AlertFormatter()

    def test_format_alert_embed(self, sample_product):
        """Test the Discord embed structure."""
        alert = self.formatter.format_alert(sample_product)

        assert isinstance(alert, FormattedAlert)
        embeds = alert.payload["embeds"]
        assert len(embeds) == 1

        embed = embeds[0]
        assert embed["title"] == "OMEGA - Speedmaster Professional Moonwatch"
        assert embed["url"] == f"{PRODUCT_PAGE_BASE_URL}/1001"
        assert embed["fields"] == [
            {"name": "Size", "value": "42mm"},
            {"name": "Product Condition", "value": "A"},
            {"name": "Price", "value": "¥698000"},
        ]
        assert embed["thumbnail"] == {"url": "https://img.rinkan-online.com/1001/1.jpg"}

    def test_thumbnail_uses_first_image(self):
        product = make_product(images=["https://img/a.jpg", "https://img/b.jpg"])

        alert = self.formatter.format_alert(product)

        assert alert.payload["embeds"][0]["thumbnail"]["url"] == "https://img/a.jpg"

    def test_no_images_omits_thumbnail(self):
        alert = self.formatter.format_alert(make_product(images=[]))

        assert "thumbnail" not in alert.payload["embeds"][0]

    def test_custom_base_url(self, sample_product):
        formatter = AlertFormatter("https://example.com/items/")

        alert = formatter.format_alert(sample_product)

        assert alert.url == "https://example.com/items/1001"

    def test_long_title_truncated(self):
        product = make_product(product_name="x" * 300)

        alert = self.formatter.format_alert(product)

        assert len(alert.title) == 256
        assert alert.title.endswith("...")
