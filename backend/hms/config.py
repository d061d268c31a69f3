"""
应用配置
从环境变量读取配置，上游 REST API 与会话 Cookie 设置
"""
from typing import List
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """应用设置"""

    # 应用基础配置
    APP_NAME: str = "HMS Console"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # 上游 REST API
    API_BASE_URL: str = "http://localhost:3000"
    API_TIMEOUT: float = 15.0
    REFRESH_PATH: str = "/api/auth/refresh"

    # 会话 Cookie
    ACCESS_COOKIE_NAME: str = "access_token"
    REFRESH_COOKIE_NAME: str = "refresh_token"
    ACCESS_COOKIE_MAX_AGE: int = 15 * 60
    REFRESH_COOKIE_MAX_AGE: int = 7 * 24 * 60 * 60
    COOKIE_SECURE: bool = False

    # 酒店默认设置（上游未返回时使用）
    DEFAULT_LANGUAGE: str = "ar"
    DEFAULT_CURRENCY: str = "SAR"
    DEFAULT_TIMEZONE: str = "Asia/Riyadh"
    DEFAULT_TAX_RATE: float = 15
    DEFAULT_CHECK_IN_TIME: str = "14:00"
    DEFAULT_CHECK_OUT_TIME: str = "12:00"

    # 列表与导出
    SEARCH_MAX_LENGTH: int = 80
    OPTIONS_PAGE_LIMIT: int = 200

    model_config = ConfigDict(env_file=".env", case_sensitive=True)


# 全局设置实例
settings = Settings()
