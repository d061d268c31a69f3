"""
列表页工具：搜索、稳定排序、统计归约
"""
from hms_core.listing.search import (
    filter_by_query, matches_query, normalize_query, normalize_search_term,
)
from hms_core.listing.sorting import SortDirection, natural_key, stable_sort, toggle_direction
from hms_core.listing.stats import count_by, count_where, sum_of

__all__ = [
    "filter_by_query", "matches_query", "normalize_query", "normalize_search_term",
    "SortDirection", "natural_key", "stable_sort", "toggle_direction",
    "count_by", "count_where", "sum_of",
]
