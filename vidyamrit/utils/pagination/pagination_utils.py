"""Pagination Utilities - DRY Implementation for Consistent Pagination (SoC)"""
from typing import Dict, List, Any, Optional
from math import ceil

from vidyamrit.config.settings import PaginationConfig


def get_pagination_params(page_param: Optional[str], limit_param: Optional[str]) -> tuple:
    """
    Extract and validate pagination parameters

    Args:
        page_param: Page parameter as string
        limit_param: Limit parameter as string

    Returns:
        Tuple of (page, limit) as integers
    """
    try:
        page = int(page_param) if page_param else 1
        page = max(1, page)
    except (ValueError, TypeError):
        page = 1

    try:
        limit = int(limit_param) if limit_param else PaginationConfig.DEFAULT_LIMIT
        limit = max(1, min(limit, PaginationConfig.MAX_LIMIT))
    except (ValueError, TypeError):
        limit = PaginationConfig.DEFAULT_LIMIT

    return page, limit


def build_pagination_meta(total_count: int, page: int, limit: int) -> Dict:
    """Pagination block for results already sliced by the database"""
    total_pages = ceil(total_count / limit) if total_count > 0 else 1
    return {
        "page": page,
        "limit": limit,
        "total": total_count,
        "totalPages": total_pages,
        "hasNext": page < total_pages,
        "hasPrev": page > 1
    }


def build_paginated_response(items: List[Any], total_count: int, page: int, limit: int) -> Dict:
    """
    Build standardized paginated payload

    Args:
        items: Items of the requested page
        total_count: Number of matching items across all pages
        page: Page number
        limit: Items per page

    Returns:
        Dict with the page items and pagination metadata
    """
    return {
        "items": items,
        "pagination": build_pagination_meta(total_count, page, limit)
    }
