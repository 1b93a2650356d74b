"""
Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the Rinkan Monitor test suite.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from rinkan_monitor.components.product_poller import PageEntry
from rinkan_monitor.models.config import Configuration, MonitorSettings
from rinkan_monitor.models.delivery import DeliveryResult
from rinkan_monitor.models.product import Product

BASE_TIME = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_product_data(code: str = "1001", minutes: int = 5, **overrides) -> dict:
    """Build a search API product object created ``minutes`` after BASE_TIME."""
    data = {
        "brand_name": "OMEGA",
        "product_name": "Speedmaster Professional Moonwatch",
        "product_code": code,
        "model_name": "Speedmaster Professional 311.30.42.30.01.005",
        "size": "42mm",
        "product_condition": "A",
        "price": 698000,
        "created_at": (BASE_TIME + timedelta(minutes=minutes)).isoformat(),
        "images": [f"https://img.rinkan-online.com/{code}/1.jpg"],
    }
    data.update(overrides)
    return data


def make_product(code: str = "1001", minutes: int = 5, **overrides) -> Product:
    return Product.from_api(make_product_data(code, minutes, **overrides))


def stub_pages(poller, *pages) -> Mock:
    """
    Serve search pages to ``poller`` without HTTP.

    Each fetch returns the next page (a list of products) or raises it if it
    is an exception; the last page is repeated once the others are used up.
    """
    remaining = list(pages)

    def fetch(page):
        current = remaining.pop(0) if len(remaining) > 1 else remaining[0]
        if isinstance(current, Exception):
            raise current
        return [PageEntry(created_at=p.created_at, product=p) for p in current]

    poller._fetch_entries = Mock(side_effect=fetch)
    return poller._fetch_entries


@pytest.fixture
def sample_product_data():
    """Create a sample search API product object."""
    return make_product_data()


@pytest.fixture
def sample_product():
    """Create a sample Product for testing."""
    return make_product()


@pytest.fixture
def sample_monitor_settings():
    """Create MonitorSettings with no notification delay."""
    return MonitorSettings(
        tick_interval=300,
        pagination_enabled=True,
        notification_delay=0.0,
        request_timeout=5,
    )


@pytest.fixture
def sample_configuration(sample_monitor_settings):
    """Create a search-delegated Configuration for testing."""
    return Configuration(
        keywords=("Speedmaster",),
        colors={"blue": True},
        categories=(),
        brand=None,
        discord_webhook_url="https://discord.com/api/webhooks/123/abc",
        monitor=sample_monitor_settings,
    )


@pytest.fixture
def local_filter_configuration(sample_monitor_settings):
    """Create a local-filter Configuration for testing."""
    return Configuration(
        keywords=("Speedmaster", "Seamaster"),
        colors={"black": True, "blue": False},
        categories=("watch",),
        brand="OMEGA",
        discord_webhook_url="https://discord.com/api/webhooks/123/abc",
        monitor=sample_monitor_settings,
    )


@pytest.fixture
def mock_message_dispatcher():
    """Create a mock message dispatcher for testing."""
    dispatcher = Mock()
    dispatcher.send_alert.return_value = DeliveryResult(
        success=True, delivery_time=datetime.now(timezone.utc), error_message=None
    )
    return dispatcher


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "unit: mark test as unit test")


def pytest_collection_modifyitems(config, items):
    """Add the unit marker to tests that are not integration or slow."""
    for item in items:
        if not any(
            marker.name in ["integration", "slow"] for marker in item.iter_markers()
        ):
            item.add_marker(pytest.mark.unit)
