"""
子超级管理员监控服务

风险评分由上游计算，这里负责筛选参数的整理、风险标签本地化与活动汇总的清洗。
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from hms.config import settings
from hms.domain.labels import RISK_BADGE_TONES, RISK_LEVEL_LABELS, risk_flag_label
from hms.models.ontology import SubSuperAdmin
from hms.models.schemas import SubSuperAdminUpdate
from hms.services.base import ConsoleService
from hms_core.i18n import label
from hms_core.listing import normalize_search_term

logger = logging.getLogger(__name__)

MONITORING_SORT_FIELDS = (
    "createdAt", "lastLogin", "operationsCount", "operationsInRange", "operations24h",
    "hotelsCreated", "accountsCreated", "lastActivityAt", "riskScore",
)
MONITORING_LIMIT_DEFAULT = 20
MONITORING_LIMIT_MAX = 100
ACTIVITY_LIMIT_DEFAULT = 15


@dataclass
class MonitoringFilters:
    """监控列表筛选条件（'all' 表示不过滤）"""
    search: str = ""
    status: str = "all"
    verification: str = "all"
    activity: str = "all"
    sort_by: str = "riskScore"
    sort_order: str = "desc"
    date_from: str = ""
    date_to: str = ""
    page: int = 1
    limit: int = MONITORING_LIMIT_DEFAULT

    def to_params(self) -> Dict[str, Any]:
        """上游查询参数：'all' 与空值不转发，分页参数收敛到合法范围"""
        sort_by = self.sort_by if self.sort_by in MONITORING_SORT_FIELDS else "riskScore"
        sort_order = self.sort_order if self.sort_order in ("asc", "desc") else "desc"
        params: Dict[str, Any] = {
            "page": max(self.page, 1),
            "limit": max(1, min(MONITORING_LIMIT_MAX, self.limit)),
            "sortBy": sort_by,
            "sortOrder": sort_order,
        }
        search = normalize_search_term(self.search, settings.SEARCH_MAX_LENGTH)
        if search:
            params["search"] = search
        for key, value in (("status", self.status), ("verification", self.verification),
                           ("activity", self.activity)):
            if value and value != "all":
                params[key] = value
        if self.date_from:
            params["from"] = self.date_from
        if self.date_to:
            params["to"] = self.date_to
        return params


def normalize_summary_buckets(values: Any) -> List[Dict[str, Any]]:
    """
    清洗活动汇总的分组

    计数不是数字的条目丢弃；_id 既不是字符串也不是空值的条目丢弃；空 _id 显示为 '-'。
    """
    if not isinstance(values, list):
        return []
    buckets = []
    for entry in values:
        if not isinstance(entry, dict):
            continue
        count = entry.get("count")
        if not isinstance(count, (int, float)) or isinstance(count, bool):
            continue
        bucket_id = entry.get("_id")
        if bucket_id is not None and not isinstance(bucket_id, str):
            continue
        buckets.append({"_id": bucket_id or "-", "count": count})
    return buckets


class MonitoringService(ConsoleService):
    """子超级管理员监控视图（仅主超级管理员）"""

    async def overview(self, filters: MonitoringFilters) -> Dict[str, Any]:
        params = filters.to_params()
        payload = await self.api.get(
            "/api/super-admin/sub-super-admins",
            params=params,
            fallback="تعذر تحميل بيانات مراقبة الصب سوبر أدمن",
        )
        items = [SubSuperAdmin.model_validate(item) for item in self.unwrap_list(payload)]
        return {
            "overview": payload.get("overview"),
            "items": [self._item(item) for item in items],
            "pagination": payload.get("pagination") or {
                "page": params["page"], "limit": params["limit"], "total": 0, "pages": 0,
            },
            "filters": params,
        }

    def _item(self, item: SubSuperAdmin) -> Dict[str, Any]:
        row = item.to_api()
        row["risk"] = {
            **item.risk.to_api(),
            "levelLabel": label(RISK_LEVEL_LABELS, item.risk.level, self.lang),
            "tone": RISK_BADGE_TONES.get(item.risk.level, "success"),
            "flagLabels": [risk_flag_label(flag, self.lang) for flag in item.risk.flags],
        }
        return row

    async def activity(
        self,
        sub_super_admin_id: str,
        action: Optional[str] = None,
        entity_type: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        page: int = 1,
        limit: int = ACTIVITY_LIMIT_DEFAULT,
    ) -> Dict[str, Any]:
        """单个子超级管理员的操作记录与汇总"""
        page = max(page, 1)
        payload = await self.api.get(
            f"/api/super-admin/sub-super-admins/{sub_super_admin_id}/activity",
            params={
                "page": page,
                "limit": limit,
                "action": action,
                "entityType": entity_type,
                "from": date_from,
                "to": date_to,
            },
            fallback="تعذر تحميل سجل النشاط التفصيلي",
        )
        raw_summary = payload.get("summary")
        summary = None
        if isinstance(raw_summary, dict):
            summary = {
                "totalOperations": raw_summary.get("totalOperations") or 0,
                "byAction": normalize_summary_buckets(raw_summary.get("byAction")),
                "byEntity": normalize_summary_buckets(raw_summary.get("byEntity")),
            }
        return {
            "items": self.unwrap_list(payload),
            "summary": summary,
            "pagination": payload.get("pagination") or {
                "page": page, "limit": limit, "total": 0, "pages": 0,
            },
        }

    async def update(self, user_id: str, form: SubSuperAdminUpdate) -> Dict[str, Any]:
        """启用/停用、认证/取消认证，可附带管理备注"""
        payload = await self.api.patch(
            f"/api/super-admin/users/{user_id}",
            json=form.to_api(),
            fallback="فشل تحديث حساب الصب سوبر أدمن",
        )
        logger.info(f"Sub super admin {user_id} updated: {sorted(form.to_api())}")
        return self.unwrap_object(payload)
