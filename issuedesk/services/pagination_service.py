"""
pagination_service.py - Pagination controller
Single responsibility: slice results into pages and keep page/limit valid.
"""
import logging
import math
from dataclasses import replace
from typing import Sequence, TypeVar

from issuedesk.config import PAGE_SIZE_OPTIONS
from issuedesk.state import Pagination

logger = logging.getLogger(__name__)

T = TypeVar("T")


def total_pages(count: int, limit: int) -> int:
    """ceil(count / limit), never below 1 so an empty result still shows "1 of 1"."""
    if limit <= 0:
        raise ValueError("limit must be positive")
    return max(1, math.ceil(max(count, 0) / limit))


def paginate(items: Sequence[T], page: int, limit: int) -> tuple[list[T], int]:
    """Return (visible slice, total pages); an out-of-range page yields an empty slice."""
    pages = total_pages(len(items), limit)
    if page < 1 or page > pages:
        return [], pages
    start = (page - 1) * limit
    return list(items[start:start + limit]), pages


def go_to_page(pagination: Pagination, page: int, pages: int) -> Pagination:
    """Out-of-range navigation is a no-op, not an error."""
    if page < 1 or page > pages:
        logger.debug("Ignoring page %s outside 1..%s", page, pages)
        return pagination
    return replace(pagination, page=page)


def change_limit(pagination: Pagination, limit: int) -> Pagination:
    if limit not in PAGE_SIZE_OPTIONS:
        raise ValueError(f"Unsupported page size: {limit}")
    return Pagination(page=1, limit=limit)


def reset_page(pagination: Pagination) -> Pagination:
    return replace(pagination, page=1)


def clamp(pagination: Pagination, pages: int) -> Pagination:
    """Pull the page back inside 1..pages after the result set shrank."""
    if pagination.page > pages:
        return replace(pagination, page=pages)
    return pagination


def range_label(pagination: Pagination, count: int) -> str:
    if count == 0:
        return "0 of 0"
    first = (pagination.page - 1) * pagination.limit + 1
    last = min(pagination.page * pagination.limit, count)
    return f"{first}-{last} of {count}"
