"""
hms_core/export/csv_export.py

CSV 导出 - 兼容 Excel 打开阿语内容

格式约定：
- 分隔符随语言变化：en 使用 ','，ar 使用 ';'
- 表头不加引号；数据单元格一律加双引号，内部双引号成对转义
- 单元格内的换行（\\r/\\n 连续段）替换为一个空格
- 行之间以 '\\n' 连接，内容前加 UTF-8 BOM
"""
import csv
import io
import re
from datetime import date, datetime, UTC
from typing import Any, Iterable, Optional, Sequence

from hms_core.i18n import normalize_language

CSV_BOM = "\ufeff"
CSV_MEDIA_TYPE = "text/csv; charset=utf-8"

_LINE_BREAKS = re.compile(r"[\r\n]+")


def csv_delimiter(lang: str) -> str:
    """英语用逗号，阿语用分号"""
    return "," if normalize_language(lang) == "en" else ";"


def clean_cell(value: Any) -> str:
    """单元格文本：None 视为空串，换行压成空格"""
    if value is None:
        return ""
    return _LINE_BREAKS.sub(" ", str(value))


def build_csv(headers: Sequence[str], rows: Iterable[Sequence[Any]], lang: str) -> str:
    """
    生成带 BOM 的 CSV 文本

    Args:
        headers: 表头（已本地化）
        rows: 数据行
        lang: 语言，决定分隔符

    Returns:
        CSV 字符串（以 BOM 开头，末尾无换行）
    """
    delimiter = csv_delimiter(lang)
    buffer = io.StringIO()

    header_writer = csv.writer(buffer, delimiter=delimiter, lineterminator="\n")
    header_writer.writerow(headers)

    row_writer = csv.writer(buffer, delimiter=delimiter, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        row_writer.writerow([clean_cell(value) for value in row])

    return CSV_BOM + buffer.getvalue().rstrip("\n")


def export_filename(prefix: str, today: Optional[date] = None) -> str:
    """导出文件名：{prefix}-YYYY-MM-DD.csv（UTC 日期）"""
    day = today or datetime.now(UTC).date()
    return f"{prefix}-{day.isoformat()}.csv"


def content_disposition(filename: str) -> str:
    """附件下载头"""
    return f'attachment; filename="{filename}"'
