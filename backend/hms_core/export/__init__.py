"""
导出工具
"""
from hms_core.export.csv_export import (
    CSV_BOM, CSV_MEDIA_TYPE, build_csv, clean_cell, content_disposition,
    csv_delimiter, export_filename,
)

__all__ = [
    "CSV_BOM", "CSV_MEDIA_TYPE", "build_csv", "clean_cell", "content_disposition",
    "csv_delimiter", "export_filename",
]
