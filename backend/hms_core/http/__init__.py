"""
HTTP 工具
"""
from hms_core.http.refresh_client import RefreshingClient

__all__ = ["RefreshingClient"]
