"""
hms_core/listing/search.py

列表页的客户端搜索：对已取回的数据做大小写不敏感的子串匹配
"""
from typing import Any, Callable, Iterable, List, Optional, TypeVar

T = TypeVar("T")


def normalize_query(query: Optional[str]) -> str:
    """去掉首尾空白并转小写"""
    return (query or "").strip().lower()


def normalize_search_term(value: Optional[str], max_length: int = 80) -> str:
    """发往上游的搜索词：去空白并截断到 max_length"""
    return (value or "").strip()[:max_length]


def matches_query(query: Optional[str], fields: Iterable[Any]) -> bool:
    """
    任一字段包含查询串即命中

    空查询总是命中；None 字段被忽略。
    """
    needle = normalize_query(query)
    if not needle:
        return True
    for value in fields:
        if value is None:
            continue
        if needle in str(value).lower():
            return True
    return False


def filter_by_query(items: Iterable[T], query: Optional[str],
                    fields: Callable[[T], Iterable[Any]]) -> List[T]:
    """按查询串过滤，保持原有顺序"""
    needle = normalize_query(query)
    if not needle:
        return list(items)
    return [item for item in items if matches_query(needle, fields(item))]
