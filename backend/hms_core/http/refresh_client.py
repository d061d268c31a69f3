"""
hms_core/http/refresh_client.py

带会话刷新的 HTTP 客户端

请求返回 401 时调用一次刷新端点；刷新成功则把原请求重试一次，
刷新失败则返回原来的 401 响应。没有重试循环，也没有退避。
同一个客户端上同时出现的多个 401 共享同一次进行中的刷新。
"""
import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class RefreshingClient:
    """
    会话刷新客户端

    会话 Cookie 由本类自行维护（而不是交给 httpx 的 cookie jar），
    以便把上游轮换后的 Cookie 回传给浏览器。

    Attributes:
        client: 底层 httpx.AsyncClient
        refresh_path: 刷新端点路径
        cookies: 当前会话 Cookie，随响应的 Set-Cookie 更新
        rotated: 本客户端生命周期内上游新下发的 Cookie
        refresh_count: 实际发出的刷新请求次数
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        refresh_path: str = "/api/auth/refresh",
        cookies: Optional[Dict[str, str]] = None,
    ):
        self.client = client
        self.refresh_path = refresh_path
        self.cookies: Dict[str, str] = dict(cookies or {})
        self.rotated: Dict[str, str] = {}
        self.refresh_count = 0
        self._refresh_task: Optional[asyncio.Future] = None

    async def request(self, method: str, url: str, refresh: bool = True, **kwargs: Any) -> httpx.Response:
        """发送请求，401 时刷新会话并重试一次（refresh=False 时直接返回）"""
        response = await self._send(method, url, **kwargs)
        if response.status_code != 401 or not refresh:
            return response

        refreshed = await self.refresh_session()
        if not refreshed:
            return response

        logger.debug(f"Retrying {method} {url} after session refresh")
        return await self._send(method, url, **kwargs)

    async def refresh_session(self) -> bool:
        """刷新会话；已有刷新在进行时直接等待它的结果"""
        task = self._refresh_task
        if task is None:
            task = asyncio.ensure_future(self._refresh())
            self._refresh_task = task
            task.add_done_callback(self._clear_refresh_task)
        return await asyncio.shield(task)

    def _clear_refresh_task(self, task: asyncio.Future) -> None:
        if self._refresh_task is task:
            self._refresh_task = None

    async def _refresh(self) -> bool:
        self.refresh_count += 1
        try:
            response = await self._send("POST", self.refresh_path)
        except httpx.HTTPError as e:
            logger.warning(f"Session refresh failed: {e}")
            return False

        if response.is_success:
            logger.info("Session refreshed")
            return True

        logger.info(f"Session refresh rejected with status {response.status_code}")
        return False

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        headers = dict(kwargs.pop("headers", None) or {})
        if self.cookies:
            headers["Cookie"] = "; ".join(f"{name}={value}" for name, value in self.cookies.items())
        response = await self.client.request(method, url, headers=headers, **kwargs)
        self._store_cookies(response)
        return response

    def _store_cookies(self, response: httpx.Response) -> None:
        for name, value in response.cookies.items():
            self.cookies[name] = value
            self.rotated[name] = value
        # 会话 Cookie 只保存在 self.cookies
        self.client.cookies.clear()

    async def aclose(self) -> None:
        await self.client.aclose()
