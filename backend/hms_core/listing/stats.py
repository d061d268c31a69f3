"""
hms_core/listing/stats.py

统计卡片用的简单归约（计数、求和）
"""
from collections import Counter
from typing import Any, Callable, Dict, Iterable, Optional, TypeVar

T = TypeVar("T")


def count_where(items: Iterable[T], predicate: Callable[[T], bool]) -> int:
    """满足条件的元素个数"""
    return sum(1 for item in items if predicate(item))


def sum_of(items: Iterable[T], value: Callable[[T], Any],
           predicate: Optional[Callable[[T], bool]] = None) -> float:
    """对 value(item) 求和，缺失值按 0 计"""
    total = 0.0
    for item in items:
        if predicate is not None and not predicate(item):
            continue
        total += value(item) or 0
    return total


def count_by(items: Iterable[T], key: Callable[[T], Any]) -> Dict[Any, int]:
    """按 key 分组计数"""
    return dict(Counter(key(item) for item in items))
