"""
hms_core/listing/sorting.py

稳定排序工具

降序是对升序结果的精确反转：比较结果取反，键相同的元素在两个方向上都保持原有顺序。
"""
import re
from enum import Enum
from typing import Any, Callable, Iterable, List, Tuple, TypeVar

T = TypeVar("T")

_DIGITS = re.compile(r"(\d+)")


class SortDirection(str, Enum):
    """排序方向"""
    ASC = "asc"
    DESC = "desc"


def stable_sort(items: Iterable[T], key: Callable[[T], Any],
                direction: str = SortDirection.ASC) -> List[T]:
    """按 key 稳定排序，direction 为 'desc' 时反转比较结果"""
    descending = SortDirection(direction) == SortDirection.DESC
    return sorted(items, key=key, reverse=descending)


def toggle_direction(direction: str) -> SortDirection:
    """在升序/降序之间切换"""
    if SortDirection(direction) == SortDirection.ASC:
        return SortDirection.DESC
    return SortDirection.ASC


def natural_key(text: Any) -> Tuple[Tuple[int, Any], ...]:
    """
    自然排序键：数字段按数值比较，其余按小写文本比较

    Example:
        >>> sorted(["101", "9", "A2"], key=natural_key)
        ['9', '101', 'A2']
    """
    parts = []
    for chunk in _DIGITS.split(str(text or "")):
        if not chunk:
            continue
        if chunk.isdigit():
            parts.append((0, int(chunk)))
        else:
            parts.append((1, chunk.lower()))
    return tuple(parts)
