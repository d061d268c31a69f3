"""
hms_core/i18n.py

双语（阿拉伯语/英语）文案工具
"""
from typing import Any, Dict, Mapping, Optional

SUPPORTED_LANGUAGES = ("ar", "en")
DEFAULT_LANGUAGE = "ar"


def normalize_language(value: Any) -> str:
    """规范化语言代码，只有 'en' 会被识别，其余一律视为 'ar'"""
    return "en" if value == "en" else DEFAULT_LANGUAGE


def t(lang: str, ar: str, en: str) -> str:
    """最小化翻译函数：t(lang, '阿语文案', 'English text')"""
    return en if lang == "en" else ar


def label(table: Mapping[str, Dict[str, str]], key: Optional[str], lang: str,
          fallback: Optional[str] = None) -> str:
    """
    从双语标签表中取出某个值的文案

    Args:
        table: {value: {"ar": ..., "en": ...}} 形式的标签表
        key: 要查找的值
        lang: 语言
        fallback: 找不到时的返回值，默认返回 key 本身

    Returns:
        本地化后的文案
    """
    entry = table.get(key) if key is not None else None
    if entry is None:
        if fallback is not None:
            return fallback
        return key or ""
    return entry.get(normalize_language(lang)) or entry.get(DEFAULT_LANGUAGE) or (key or "")
