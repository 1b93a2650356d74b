"""
Core components for the Rinkan Monitor.

This module contains the components that build the search query, poll
the search API, filter products and dispatch webhook alerts.
"""

from .alert_formatter import AlertFormatter
from .keyword_filter import KeywordFilter
from .message_dispatcher import DiscordDispatcher
from .product_poller import PollResult, ProductPoller, SearchAPIError
from .query_builder import QueryParameters, build_query_parameters

__all__ = [
    "AlertFormatter",
    "KeywordFilter",
    "DiscordDispatcher",
    "PollResult",
    "ProductPoller",
    "SearchAPIError",
    "QueryParameters",
    "build_query_parameters",
]
