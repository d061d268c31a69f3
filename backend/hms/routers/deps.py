"""
路由层公共工具：本地业务错误到 HTTP 错误的转换、CSV 下载响应
"""
from fastapi import HTTPException, Response, status

from hms.domain.errors import ActionNotAllowedError, ConsoleValidationError, NothingToExportError
from hms_core.export import CSV_MEDIA_TYPE, content_disposition
from hms_core.i18n import t


def console_error(e: Exception, lang: str = "ar") -> HTTPException:
    """
    服务层异常 -> HTTPException

    字段校验失败 422，被禁用的操作 409，导出为空 404。
    """
    if isinstance(e, ConsoleValidationError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.to_dict())
    if isinstance(e, ActionNotAllowedError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.to_dict())
    if isinstance(e, NothingToExportError):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=t(lang, "لا توجد بيانات للتصدير", "Nothing to export"),
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def csv_response(filename: str, content: str) -> Response:
    return Response(
        content=content.encode("utf-8"),
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": content_disposition(filename)},
    )
