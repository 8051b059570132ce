"""响应封装：构建系统统一的返回结构。"""

from app.packages.portal.api.v1.schemas.common import SuccessResponse


def success_response() -> SuccessResponse:
    """写操作成功后返回 ``{"success": true}``。"""
    return SuccessResponse(success=True)
