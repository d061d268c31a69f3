"""
酒店设置服务
"""
import logging
from typing import Any, Dict

from hms.models.schemas import HotelSettingsUpdate
from hms.security.context import ConsoleContext
from hms.services.base import ConsoleService

logger = logging.getLogger(__name__)


class SettingsService(ConsoleService):
    """酒店资料与偏好设置"""

    def current(self) -> Dict[str, Any]:
        """当前会话中已补齐默认值的设置"""
        return {
            "hotel": self.context.hotel_profile if self.context else {},
            "settings": self.context.hotel_settings.to_dict() if self.context else {},
        }

    async def update(self, form: HotelSettingsUpdate) -> Dict[str, Any]:
        """
        保存设置

        上游返回更新后的用户对象，据此重建会话上下文后再返回。
        """
        payload = await self.api.patch(
            "/api/auth/me",
            json=form.to_api(),
            fallback=self.t("تعذر حفظ الإعدادات", "Failed to save settings"),
        )
        user = payload.get("user")
        if isinstance(user, dict):
            self.context = ConsoleContext.from_api(user)
            self.api.lang = self.context.lang
        logger.info(f"Hotel settings updated by {self.context.user_id if self.context else None}")
        result = self.current()
        result["message"] = self.t("تم حفظ الإعدادات بنجاح", "Settings saved successfully")
        return result
