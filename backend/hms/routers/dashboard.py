"""
仪表盘与酒店设置路由
"""
from fastapi import APIRouter, Depends

from hms.api_client import ApiClient, get_api
from hms.models.schemas import HotelSettingsUpdate
from hms.security import permissions as perms
from hms.security.auth import get_current_user, require_permission
from hms.security.context import ConsoleContext
from hms.services.dashboard_service import DashboardService
from hms.services.settings_service import SettingsService

router = APIRouter(prefix="/console", tags=["仪表盘"])


@router.get("/dashboard")
async def get_dashboard(
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(get_current_user)
):
    """今日概况"""
    return await DashboardService(api, current_user).overview()


# ============== 酒店设置 ==============

@router.get("/settings")
async def get_settings(
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.SETTINGS_READ))
):
    """获取酒店设置（缺失项已补齐默认值）"""
    return SettingsService(api, current_user).current()


@router.put("/settings")
async def update_settings(
    data: HotelSettingsUpdate,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.SETTINGS_UPDATE))
):
    """保存酒店资料与设置"""
    return await SettingsService(api, current_user).update(data)
