"""
Configuration models for the system.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple
from urllib.parse import urlparse

from dateutil import tz

# Internal color names mapped to the color labels used by the search API
COLOR_LABELS: Dict[str, str] = {
    "white": "ホワイト",
    "gray": "グレー",
    "black": "ブラック",
    "brown": "ブラウン",
    "beige": "ベージュ",
    "yellow": "イエロー",
    "green": "グリーン",
    "blue": "ブルー",
    "purple": "パープル",
    "pink": "ピンク",
    "red": "レッド",
    "orange": "オレンジ",
    "silver": "シルバー",
    "gold": "ゴールド",
    "others": "その他",
}


class WatermarkPolicy(Enum):
    """How the watermark is initialised at startup."""

    NOW = "now"  # Suppress everything already listed
    UNSET = "unset"  # Report everything in stock on the first tick


@dataclass(frozen=True)
class MonitorSettings:
    """Polling and delivery settings."""

    tick_interval: int = 300
    pagination_enabled: bool = True
    initial_watermark: WatermarkPolicy = WatermarkPolicy.NOW
    notification_delay: float = 2.0
    request_timeout: float = 30.0
    max_pages: Optional[int] = None
    api_timezone: str = "Asia/Tokyo"

    def validate(self) -> bool:
        """Validate monitor settings."""
        if not isinstance(self.tick_interval, int) or self.tick_interval <= 0:
            raise ValueError("Tick interval must be a positive integer")

        if self.tick_interval < 30:
            raise ValueError("Tick interval must be at least 30 seconds")

        if not isinstance(self.pagination_enabled, bool):
            raise ValueError("pagination_enabled must be a boolean")

        if not isinstance(self.initial_watermark, WatermarkPolicy):
            raise ValueError("initial_watermark must be 'now' or 'unset'")

        if (
            not isinstance(self.notification_delay, (int, float))
            or self.notification_delay < 0
        ):
            raise ValueError("Notification delay must be a non-negative number")

        if (
            not isinstance(self.request_timeout, (int, float))
            or self.request_timeout <= 0
        ):
            raise ValueError("Request timeout must be a positive number")

        if self.max_pages is not None:
            if not isinstance(self.max_pages, int) or self.max_pages <= 0:
                raise ValueError("max_pages must be a positive integer")

        if tz.gettz(self.api_timezone) is None:
            raise ValueError(f"Unknown API timezone: {self.api_timezone}")

        return True


@dataclass(frozen=True)
class Configuration:
    """User search criteria and delivery target."""

    keywords: Tuple[str, ...]
    colors: Dict[str, bool]
    categories: Tuple[str, ...]
    brand: Optional[str]
    discord_webhook_url: str
    monitor: MonitorSettings = field(default_factory=MonitorSettings)

    @property
    def search_delegated(self) -> bool:
        """The search API only accepts a single free-text term."""
        return len(self.keywords) == 1

    def validate(self) -> bool:
        """Validate system configuration."""
        if not isinstance(self.keywords, tuple):
            raise ValueError("Keywords must be a list")

        for keyword in self.keywords:
            if not isinstance(keyword, str) or not keyword.strip():
                raise ValueError("All keywords must be non-empty strings")

        if not isinstance(self.colors, dict):
            raise ValueError("Colors must be a mapping of color name to boolean")

        for color_name, enabled in self.colors.items():
            if color_name not in COLOR_LABELS:
                raise ValueError(
                    f"Unknown color '{color_name}'. "
                    f"Valid colors: {list(COLOR_LABELS)}"
                )
            if not isinstance(enabled, bool):
                raise ValueError(f"Color flag for '{color_name}' must be a boolean")

        if not isinstance(self.categories, tuple):
            raise ValueError("Categories must be a list")

        for category in self.categories:
            if not isinstance(category, str) or not category.strip():
                raise ValueError("All categories must be non-empty strings")

        if self.brand is not None and not isinstance(self.brand, str):
            raise ValueError("Brand must be a string")

        if not self.discord_webhook_url or not isinstance(
            self.discord_webhook_url, str
        ):
            raise ValueError("discord_webhook_url is required")

        parsed_url = urlparse(self.discord_webhook_url)
        if not parsed_url.scheme or not parsed_url.netloc:
            raise ValueError(
                f"Invalid webhook URL format: {self.discord_webhook_url}"
            )

        if parsed_url.scheme not in ["http", "https"]:
            raise ValueError("Webhook URL must use HTTP or HTTPS")

        self.monitor.validate()

        return True
