"""Local keyword filter for products returned by the search API."""

import logging
from typing import Iterable

from ..models.product import Product

logger = logging.getLogger(__name__)


class KeywordFilter:
    """Matches products against configured keywords."""

    def __init__(self, keywords: Iterable[str], search_delegated: bool = False):
        """Initialize filter with keywords and the active search mode."""
        self.keywords = [keyword.lower() for keyword in keywords]
        self.search_delegated = search_delegated

        logger.info(
            f"KeywordFilter initialized with {len(self.keywords)} keyword(s), "
            f"search_delegated={search_delegated}"
        )

    def matches(self, product: Product) -> bool:
        """Check if the product's model name contains any keyword."""
        if not self.keywords:
            return True  # Server-side filters are enough

        if self.search_delegated:
            return True  # The API already searched for the single keyword

        model_name = product.model_name.lower()
        matched = any(keyword in model_name for keyword in self.keywords)

        logger.debug(
            f"Keyword match for product {product.product_code}: {matched} "
            f"(model: {product.model_name!r})"
        )
        return matched
