"""
Search API polling components for the Rinkan Monitor.

This module fetches the newest in-stock products from the search API,
walking pages until it reaches products the monitor has already seen.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional

import requests
from dateutil import tz
from requests.adapters import HTTPAdapter

from ..models.product import Product, parse_created_at
from ..utils.error_handling import ErrorCategory, ErrorSeverity, get_error_tracker
from .query_builder import QueryParameters

logger = logging.getLogger(__name__)

SEARCH_API_ENDPOINT = "https://api.rinkan-online.com/api/search"


class SearchAPIError(Exception):
    """Raised when a search request fails or returns an unusable response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class PageEntry:
    """One item of a search page; ``product`` is None if it was malformed."""

    created_at: Optional[datetime]
    product: Optional[Product]


@dataclass
class PollResult:
    """Products collected during one tick, newest first."""

    products: List[Product] = field(default_factory=list)
    pages_fetched: int = 0
    skipped: int = 0
    truncated: bool = False

    @property
    def oldest_created_at(self) -> Optional[datetime]:
        if not self.products:
            return None
        return min(product.created_at for product in self.products)


class ProductPoller:
    """Fetches product pages from the search API."""

    def __init__(
        self,
        query: QueryParameters,
        endpoint: str = SEARCH_API_ENDPOINT,
        timeout: float = 30,
        pagination_enabled: bool = True,
        max_pages: Optional[int] = None,
        api_timezone: str = "Asia/Tokyo",
    ):
        """
        Initialize product poller.

        Args:
            query: Static query parameters reused for every request
            endpoint: Search endpoint URL
            timeout: Request timeout in seconds
            pagination_enabled: Walk pages until a stale product is found
            max_pages: Optional cap on pages fetched per tick
            api_timezone: Timezone for naive ``created_at`` values
        """
        self.query = query
        self.endpoint = endpoint
        self.timeout = timeout
        self.pagination_enabled = pagination_enabled
        self.max_pages = max_pages
        self.api_tz = tz.gettz(api_timezone)

        self.session = requests.Session()
        adapter = HTTPAdapter(max_retries=0)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)
        self.session.headers.update(
            {
                "User-Agent": "Rinkan-Monitor/1.0",
                "Accept": "application/json",
            }
        )

    def fetch_page(self, page: Optional[int] = None) -> List[Product]:
        """
        Fetch a single page of search results.

        Malformed items are logged and left out.

        Args:
            page: Page number, or None to omit the page parameter

        Returns:
            Products in API order (newest first)

        Raises:
            SearchAPIError: On network errors, non-success status codes or
                malformed responses
        """
        return [entry.product for entry in self._fetch_entries(page) if entry.product]

    def _fetch_entries(self, page: Optional[int]) -> List[PageEntry]:
        logger.debug(f"Fetching search page {page}")

        try:
            response = self.session.get(
                self.endpoint, params=self.query.for_page(page), timeout=self.timeout
            )
        except requests.exceptions.Timeout:
            raise SearchAPIError(
                f"Timeout after {self.timeout}s fetching search page {page}"
            )
        except requests.exceptions.RequestException as e:
            raise SearchAPIError(f"Network error fetching search page {page}: {e}")

        if not response.ok:
            raise SearchAPIError(
                f"Search API returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise SearchAPIError(f"Search API returned invalid JSON: {e}")

        if not isinstance(body, dict) or not isinstance(body.get("products"), list):
            raise SearchAPIError("Search API response has no 'products' list")

        return [self._parse_entry(item, page) for item in body["products"]]

    def _parse_entry(self, item: Any, page: Optional[int]) -> PageEntry:
        try:
            product = Product.from_api(item, self.api_tz)
            return PageEntry(created_at=product.created_at, product=product)
        except ValueError as e:
            code = item.get("product_code") if isinstance(item, dict) else None
            logger.warning(f"Skipping malformed product {code!r} on page {page}: {e}")
            get_error_tracker().record_error(
                component="product_poller",
                category=ErrorCategory.PARSING,
                severity=ErrorSeverity.LOW,
                message=f"Malformed product in search response: {e}",
                exception=e,
                context={"product_code": code, "page": page},
            )

        # The timestamp alone still marks where stale listings begin
        try:
            created_at = parse_created_at(
                item.get("created_at") if isinstance(item, dict) else None,
                self.api_tz,
            )
        except ValueError:
            created_at = None
        return PageEntry(created_at=created_at, product=None)

    def collect_new_products(self, watermark: Optional[datetime]) -> PollResult:
        """
        Collect products created after the watermark.

        Results are sorted newest first, so the first listing that is not
        newer than the watermark ends the scan of that page and every later
        page. Malformed listings are skipped, but a readable ``created_at``
        on one still counts for that cutoff.

        Args:
            watermark: Products at or before this time are stale; None
                accepts everything

        Returns:
            PollResult with the new products in API order
        """
        result = PollResult()
        seen_codes = set()
        page = 1 if self.pagination_enabled else None

        while True:
            entries = self._fetch_entries(page)
            result.pages_fetched += 1

            reached_stale = False
            for entry in entries:
                if entry.created_at is not None and not (
                    watermark is None or entry.created_at > watermark
                ):
                    reached_stale = True
                    break

                if entry.product is None:
                    result.skipped += 1
                    continue

                # Listings can shift between pages while we walk them
                if entry.product.product_code in seen_codes:
                    continue
                seen_codes.add(entry.product.product_code)
                result.products.append(entry.product)

            if not self.pagination_enabled or reached_stale or not entries:
                break

            if self.max_pages is not None and result.pages_fetched >= self.max_pages:
                result.truncated = True
                logger.warning(
                    f"Stopped after {result.pages_fetched} pages (max_pages reached); "
                    f"listings between {watermark} and {result.oldest_created_at} "
                    "were not fetched"
                )
                break

            page += 1

        logger.info(
            f"Collected {len(result.products)} new products "
            f"from {result.pages_fetched} page(s)"
        )
        return result
