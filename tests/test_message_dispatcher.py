"""
Unit tests for the message dispatcher.
"""

from unittest.mock import Mock, patch

import requests

from rinkan_monitor.components.message_dispatcher import DiscordDispatcher
from rinkan_monitor.models.alert import FormattedAlert
from rinkan_monitor.models.delivery import DeliveryResult

WEBHOOK_URL = "https://discord.com/api/webhooks/123/abc"


def make_response(status_code=204, body=None, text=""):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = text
    if body is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = body
    return response


class TestDiscordDispatcher:
    """Test cases for DiscordDispatcher."""

    def setup_method(self):
        """Set up test fixtures."""
        self.dispatcher = DiscordDispatcher(webhook_url=WEBHOOK_URL, timeout=10)
        self.alert = FormattedAlert(
            title="OMEGA - Speedmaster",
            url="https://rinkan-online.com/products/1001",
            payload={"embeds": [{"title": "OMEGA - Speedmaster"}]},
        )

    @patch("requests.Session.post")
    def test_send_alert_success(self, mock_post):
        """Test successful webhook delivery."""
        mock_post.return_value = make_response(204)

        result = self.dispatcher.send_alert(self.alert)

        assert isinstance(result, DeliveryResult)
        assert result.success is True
        assert result.error_message is None
        assert result.status_code == 204
        assert result.delivery_time.tzinfo is not None
        mock_post.assert_called_once_with(
            WEBHOOK_URL, json=self.alert.payload, timeout=10
        )

    @patch("requests.Session.post")
    def test_send_alert_error_message_from_body(self, mock_post):
        """The destination's error message is reported."""
        mock_post.return_value = make_response(
            400, body={"message": "Invalid Form Body", "code": 50035}
        )

        result = self.dispatcher.send_alert(self.alert)

        assert result.success is False
        assert result.error_message == "Invalid Form Body"
        assert result.status_code == 400
        assert result.delivery_time.tzinfo is not None

    @patch("requests.Session.post")
    def test_send_alert_rate_limited(self, mock_post):
        mock_post.return_value = make_response(
            429, body={"message": "You are being rate limited.", "retry_after": 1.5}
        )

        result = self.dispatcher.send_alert(self.alert)

        assert result.success is False
        assert "rate limited" in result.error_message
        assert "1.5" in result.error_message

    @patch("requests.Session.post")
    def test_send_alert_non_json_error(self, mock_post):
        mock_post.return_value = make_response(502, text="Bad Gateway")

        result = self.dispatcher.send_alert(self.alert)

        assert result.success is False
        assert result.error_message == "Bad Gateway"

    @patch("requests.Session.post")
    def test_send_alert_empty_error_body(self, mock_post):
        mock_post.return_value = make_response(500)

        result = self.dispatcher.send_alert(self.alert)

        assert result.error_message == "HTTP 500"

    @patch("requests.Session.post")
    def test_send_alert_long_error_truncated(self, mock_post):
        mock_post.return_value = make_response(500, text="x" * 2000)

        result = self.dispatcher.send_alert(self.alert)

        assert len(result.error_message) == 500

    @patch("requests.Session.post")
    def test_send_alert_network_error(self, mock_post):
        """Network errors never escape send_alert."""
        mock_post.side_effect = requests.exceptions.ConnectionError("refused")

        result = self.dispatcher.send_alert(self.alert)

        assert result.success is False
        assert "refused" in result.error_message

    @patch("requests.Session.post")
    def test_send_alert_not_retried(self, mock_post):
        mock_post.return_value = make_response(500)

        self.dispatcher.send_alert(self.alert)

        assert mock_post.call_count == 1

    def test_create_session(self):
        """Test session creation."""
        session = self.dispatcher._create_session()

        assert isinstance(session, requests.Session)
        assert "http://" in session.adapters
        assert "https://" in session.adapters
        assert session.adapters["https://"].max_retries.total == 0
