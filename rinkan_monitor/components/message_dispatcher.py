"""
Message dispatching components for the Rinkan Monitor.

This module delivers formatted alerts to a Discord webhook. Each alert is
sent exactly once; failures are reported through the DeliveryResult.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import requests
from requests.adapters import HTTPAdapter

from ..models.alert import FormattedAlert
from ..models.delivery import DeliveryResult

logger = logging.getLogger(__name__)

MAX_ERROR_LENGTH = 500


class DiscordDispatcher:
    """Discord webhook message dispatcher."""

    def __init__(self, webhook_url: str, timeout: float = 30):
        """
        Initialize Discord dispatcher.

        Args:
            webhook_url: Discord webhook URL
            timeout: Request timeout in seconds
        """
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a requests session without automatic retries."""
        session = requests.Session()

        adapter = HTTPAdapter(max_retries=0)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update({"User-Agent": "Rinkan-Monitor/1.0"})
        return session

    def send_alert(self, alert: FormattedAlert) -> DeliveryResult:
        """
        Send an alert to the webhook.

        Args:
            alert: Formatted alert to send

        Returns:
            DeliveryResult: Result of the delivery attempt
        """
        try:
            response = self.session.post(
                self.webhook_url, json=alert.payload, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            return self._failure(f"Webhook request failed: {e}")

        if not response.ok:
            return self._failure(
                self._extract_error(response), status_code=response.status_code
            )

        logger.info(f"Message sent to Discord webhook: {alert.title}")

        result = DeliveryResult(
            success=True,
            delivery_time=datetime.now(timezone.utc),
            error_message=None,
            status_code=response.status_code,
        )
        result.validate()
        return result

    def _failure(
        self, error_message: str, status_code: Optional[int] = None
    ) -> DeliveryResult:
        error_message = error_message[:MAX_ERROR_LENGTH]
        logger.error(f"Webhook error: {error_message}")

        result = DeliveryResult(
            success=False,
            delivery_time=datetime.now(timezone.utc),
            error_message=error_message,
            status_code=status_code,
        )
        result.validate()
        return result

    @staticmethod
    def _extract_error(response: requests.Response) -> str:
        """Read the error message Discord returns in the response body."""
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get("message"):
            message = str(body["message"])
            if body.get("retry_after") is not None:
                message += f" (retry after {body['retry_after']}s)"
            return message

        text = (response.text or "").strip()
        return text or f"HTTP {response.status_code}"
