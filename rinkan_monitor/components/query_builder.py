"""Builds the static search query from the user configuration."""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..models.config import COLOR_LABELS, Configuration

logger = logging.getLogger(__name__)

QueryPair = Tuple[str, str]


@dataclass(frozen=True)
class QueryParameters:
    """Ordered, repeatable query parameters for the search endpoint."""

    pairs: Tuple[QueryPair, ...]
    search_delegated: bool

    def for_page(self, page: Optional[int] = None) -> List[QueryPair]:
        """Return request params, with the page number appended when given."""
        params = list(self.pairs)
        if page is not None:
            params.append(("page", str(page)))
        return params

    def values(self, key: str) -> List[str]:
        return [value for name, value in self.pairs if name == key]


def build_query_parameters(config: Configuration) -> QueryParameters:
    """
    Translate configuration into search API query parameters.

    Results are always sorted newest first and limited to in-stock items.
    A single keyword is delegated to the API's free-text search, which only
    accepts one term; otherwise keywords are matched locally.
    """
    pairs: List[QueryPair] = [("sort", "latest"), ("stockLimit", "1")]

    if config.brand:
        pairs.append(("brand", config.brand))

    if config.search_delegated:
        pairs.append(("keyword", config.keywords[0]))

    for color_name, enabled in config.colors.items():
        if enabled:
            pairs.append(("color[]", COLOR_LABELS[color_name]))

    for category in config.categories:
        pairs.append(("category", category))

    query = QueryParameters(pairs=tuple(pairs), search_delegated=config.search_delegated)

    logger.info(
        f"Search query built ({'search-delegated' if query.search_delegated else 'local-filter'} mode): "
        f"{query.pairs}"
    )
    return query
