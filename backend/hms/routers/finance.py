"""
财务与报表路由
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from hms.api_client import ApiClient, get_api
from hms.domain.errors import NothingToExportError
from hms.routers.deps import console_error, csv_response
from hms.security import permissions as perms
from hms.security.auth import require_permission
from hms.security.context import ConsoleContext
from hms.services.finance_service import FinanceService

router = APIRouter(prefix="/console", tags=["财务报表"])


def _transaction_filters(from_date, to_date, status, method) -> dict:
    return {"fromDate": from_date, "toDate": to_date, "status": status, "method": method}


@router.get("/finance")
async def get_finance(
    from_date: Optional[str] = Query(None, alias="fromDate"),
    to_date: Optional[str] = Query(None, alias="toDate"),
    status: Optional[str] = None,
    method: Optional[str] = None,
    page: int = Query(1, ge=1),
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.REPORT_VIEW))
):
    """财务页：概览、近 6 个月趋势与交易列表（各区块独立报错）"""
    service = FinanceService(api, current_user)
    return await service.finance_page(_transaction_filters(from_date, to_date, status, method), page)


@router.get("/finance/transactions.csv")
async def export_transactions(
    from_date: Optional[str] = Query(None, alias="fromDate"),
    to_date: Optional[str] = Query(None, alias="toDate"),
    status: Optional[str] = None,
    method: Optional[str] = None,
    page: int = Query(1, ge=1),
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.REPORT_EXPORT))
):
    """导出当前页交易为 CSV"""
    service = FinanceService(api, current_user)
    try:
        filename, content = await service.export_transactions(
            _transaction_filters(from_date, to_date, status, method), page
        )
    except NothingToExportError as e:
        raise console_error(e, current_user.lang)
    return csv_response(filename, content)


@router.get("/reports")
async def get_reports(
    months: Optional[int] = None,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.REPORT_VIEW))
):
    """月度报表（3-24 个月，默认 6）"""
    return await FinanceService(api, current_user).reports_page(months)


@router.get("/reports/export.csv")
async def export_report(
    months: Optional[int] = None,
    api: ApiClient = Depends(get_api),
    current_user: ConsoleContext = Depends(require_permission(perms.REPORT_EXPORT))
):
    """导出月度报表为 CSV"""
    service = FinanceService(api, current_user)
    try:
        filename, content = await service.export_report(months)
    except NothingToExportError as e:
        raise console_error(e, current_user.lang)
    return csv_response(filename, content)
