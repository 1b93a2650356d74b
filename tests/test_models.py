"""
Unit tests for data models.
"""

from datetime import datetime, timedelta, timezone

import pytest

from rinkan_monitor.models.alert import FormattedAlert
from rinkan_monitor.models.config import (
    Configuration,
    MonitorSettings,
    WatermarkPolicy,
)
from rinkan_monitor.models.delivery import DeliveryResult
from rinkan_monitor.models.product import Product
from rinkan_monitor.models.tick import MonitorState, TickOutcome, TickResult

from conftest import BASE_TIME, make_product_data


class TestProduct:
    """Test cases for Product model."""

    def test_from_api(self, sample_product_data):
        """Test building a product from an API item."""
        product = Product.from_api(sample_product_data)

        assert product.brand_name == "OMEGA"
        assert product.product_code == "1001"
        assert product.price == 698000
        assert product.created_at == BASE_TIME + timedelta(minutes=5)
        assert product.thumbnail_url == "https://img.rinkan-online.com/1001/1.jpg"

    def test_from_api_naive_timestamp_uses_default_timezone(self):
        """Naive created_at values are interpreted in the API timezone."""
        jst = timezone(timedelta(hours=9))
        data = make_product_data(created_at="2024-05-01 21:00:00")

        product = Product.from_api(data, default_tz=jst)

        assert product.created_at == BASE_TIME

    def test_from_api_naive_timestamp_defaults_to_utc(self):
        data = make_product_data(created_at="2024-05-01 12:00:00")

        product = Product.from_api(data)

        assert product.created_at == BASE_TIME

    def test_from_api_missing_required_field(self, sample_product_data):
        del sample_product_data["product_code"]

        with pytest.raises(ValueError, match="product_code"):
            Product.from_api(sample_product_data)

    def test_from_api_blank_names_allowed(self):
        data = make_product_data(brand_name="")
        del data["product_name"]

        product = Product.from_api(data)

        assert product.brand_name == ""
        assert product.product_name == ""

    def test_from_api_invalid_timestamp(self):
        with pytest.raises(ValueError, match="Invalid created_at"):
            Product.from_api(make_product_data(created_at="not a date"))

    def test_from_api_without_images(self):
        product = Product.from_api(make_product_data(images=[]))

        assert product.images == []
        assert product.thumbnail_url is None

    def test_from_api_missing_model_name(self):
        data = make_product_data()
        data["model_name"] = None

        product = Product.from_api(data)

        assert product.model_name == ""

    def test_is_newer_than(self, sample_product):
        assert sample_product.is_newer_than(None) is True
        assert sample_product.is_newer_than(BASE_TIME) is True
        assert sample_product.is_newer_than(sample_product.created_at) is False
        assert (
            sample_product.is_newer_than(BASE_TIME + timedelta(minutes=10)) is False
        )


class TestConfiguration:
    """Test cases for Configuration model."""

    def test_valid_configuration(self, sample_configuration):
        assert sample_configuration.validate() is True

    def test_search_delegated(self, sample_configuration, local_filter_configuration):
        assert sample_configuration.search_delegated is True
        assert local_filter_configuration.search_delegated is False

    def test_no_keywords_is_local_filter_mode(self, sample_configuration):
        config = Configuration(
            keywords=(),
            colors={},
            categories=(),
            brand=None,
            discord_webhook_url=sample_configuration.discord_webhook_url,
        )

        assert config.search_delegated is False

    def test_unknown_color(self, sample_configuration):
        config = Configuration(
            keywords=(),
            colors={"turquoise": True},
            categories=(),
            brand=None,
            discord_webhook_url=sample_configuration.discord_webhook_url,
        )

        with pytest.raises(ValueError, match="Unknown color"):
            config.validate()

    def test_non_boolean_color_flag(self, sample_configuration):
        config = Configuration(
            keywords=(),
            colors={"blue": "yes"},
            categories=(),
            brand=None,
            discord_webhook_url=sample_configuration.discord_webhook_url,
        )

        with pytest.raises(ValueError, match="must be a boolean"):
            config.validate()

    def test_empty_keyword(self, sample_configuration):
        config = Configuration(
            keywords=("  ",),
            colors={},
            categories=(),
            brand=None,
            discord_webhook_url=sample_configuration.discord_webhook_url,
        )

        with pytest.raises(ValueError, match="keywords"):
            config.validate()

    def test_invalid_webhook_url(self):
        config = Configuration(
            keywords=(),
            colors={},
            categories=(),
            brand=None,
            discord_webhook_url="ftp://example.com/hook",
        )

        with pytest.raises(ValueError, match="HTTP or HTTPS"):
            config.validate()

    def test_configuration_is_immutable(self, sample_configuration):
        with pytest.raises(AttributeError):
            sample_configuration.brand = "ROLEX"


class TestMonitorSettings:
    """Test cases for MonitorSettings model."""

    def test_defaults(self):
        settings = MonitorSettings()

        assert settings.tick_interval == 300
        assert settings.pagination_enabled is True
        assert settings.initial_watermark == WatermarkPolicy.NOW
        assert settings.notification_delay == 2.0
        assert settings.request_timeout == 30.0
        assert settings.max_pages is None
        assert settings.validate() is True

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"tick_interval": 0}, "positive integer"),
            ({"tick_interval": 10}, "at least 30 seconds"),
            ({"notification_delay": -1}, "non-negative"),
            ({"request_timeout": 0}, "positive number"),
            ({"max_pages": 0}, "max_pages"),
            ({"api_timezone": "Mars/Olympus_Mons"}, "Unknown API timezone"),
        ],
    )
    def test_invalid_settings(self, kwargs, message):
        with pytest.raises(ValueError, match=message):
            MonitorSettings(**kwargs).validate()


class TestMonitorState:
    """Test cases for MonitorState model."""

    def test_advance_from_unset(self):
        state = MonitorState().advance(BASE_TIME)

        assert state.watermark == BASE_TIME

    def test_advance_forward(self):
        later = BASE_TIME + timedelta(minutes=5)

        state = MonitorState(BASE_TIME).advance(later)

        assert state.watermark == later

    def test_advance_never_moves_backwards(self):
        original = MonitorState(BASE_TIME)

        state = original.advance(BASE_TIME - timedelta(hours=1))

        assert state.watermark == BASE_TIME

    def test_advance_replaces_ahead_codes(self):
        state = MonitorState(BASE_TIME, ahead_codes=frozenset({"old"}))

        state = state.advance(BASE_TIME + timedelta(minutes=5), ["1001"])

        assert state.ahead_codes == frozenset({"1001"})
        assert MonitorState().advance(BASE_TIME).ahead_codes == frozenset()


class TestTickResult:
    """Test cases for TickResult model."""

    def test_to_dict(self):
        result = TickResult(
            outcome=TickOutcome.SUCCESS,
            started_at=BASE_TIME,
            finished_at=BASE_TIME + timedelta(seconds=3),
            state=MonitorState(BASE_TIME),
            watermark_before=None,
            pages_fetched=2,
            candidates=3,
            matched=2,
            notified=1,
            failed_notifications=["1002"],
            skipped=1,
            truncated=True,
        )

        data = result.to_dict()

        assert data["outcome"] == "success"
        assert data["duration_seconds"] == 3.0
        assert data["pages_fetched"] == 2
        assert data["notified"] == 1
        assert data["failed_notifications"] == ["1002"]
        assert data["skipped"] == 1
        assert data["truncated"] is True
        assert data["watermark_before"] is None
        assert data["watermark_after"] == BASE_TIME.isoformat()
        assert result.succeeded is True


class TestDeliveryResult:
    """Test cases for DeliveryResult model."""

    def test_failure_requires_message(self):
        result = DeliveryResult(
            success=False, delivery_time=datetime.now(), error_message=None
        )

        with pytest.raises(ValueError, match="error_message should be provided"):
            result.validate()


class TestFormattedAlert:
    """Test cases for FormattedAlert model."""

    def test_requires_embed(self):
        alert = FormattedAlert(title="OMEGA - Watch", url="https://x", payload={})

        with pytest.raises(ValueError, match="embed"):
            alert.validate()
