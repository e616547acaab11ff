# /shopstream/services/product_query_adapter.py

"""
Translation layer between storefront user input and Storefront GraphQL
variables.

The functions here are pure so the exact search syntax sent to Shopify can be
tested without any HTTP.
"""

from typing import Dict, Optional


def build_search_expression(query: Optional[str]) -> str:
    """
    Build the Storefront product search expression for a free-text query.

    Args:
        query: Raw user text, possibly empty or whitespace.

    Returns:
        ``title:*Q* OR tag:*Q*`` for a non-empty query ``Q``, otherwise an empty
        string (which the Storefront API treats as "all products").
    """
    if not query or not query.strip():
        return ""
    return f"title:*{query}* OR tag:*{query}*"


def build_search_variables(query: Optional[str], page_size: int) -> Dict:
    """Variables for the single-page search query."""
    return {"q": build_search_expression(query), "first": page_size}


def build_bulk_variables(cursor: Optional[str], page_size: int) -> Dict:
    """
    Variables for one page of the bulk listing.

    Args:
        cursor: ``endCursor`` of the previous page, or None for the first page.
        page_size: Number of products per page.
    """
    return {"cursor": cursor, "first": page_size}
