"""认证相关路由定义。"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Response
from pydantic import ValidationError

from app.packages.portal.api.v1.schemas.auth import LoginRequest
from app.packages.portal.api.v1.schemas.common import ErrorResponse, SuccessResponse
from app.packages.portal.core.config import get_settings
from app.packages.portal.core.constants import MSG_INVALID_CREDENTIALS
from app.packages.portal.core.dependencies import (
    EntityStore,
    SessionBackend,
    get_session_backend,
    get_session_token,
    get_store,
)
from app.packages.portal.core.exceptions import UnauthorizedError
from app.packages.portal.core.responses import success_response
from app.packages.portal.services.auth_service import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


_LOGIN_BODY_SCHEMA = {
    "required": True,
    "content": {"application/json": {"schema": LoginRequest.model_json_schema()}},
}


def _parse_credentials(body: Any) -> LoginRequest:
    """空字段、超长字段或缺字段都按凭证错误处理，不暴露具体原因。"""
    try:
        return LoginRequest.model_validate(body)
    except ValidationError as exc:
        raise UnauthorizedError(MSG_INVALID_CREDENTIALS) from exc


@router.post(
    "/login",
    response_model=SuccessResponse,
    responses={401: {"model": ErrorResponse}},
    openapi_extra={"requestBody": _LOGIN_BODY_SCHEMA},
)
def login(
    response: Response,
    body: Any = Body(None),
    store: EntityStore = Depends(get_store),
    sessions: SessionBackend = Depends(get_session_backend),
) -> SuccessResponse:
    """校验管理员凭证，成功后把会话写入 HttpOnly Cookie。"""
    payload = _parse_credentials(body)
    token = auth_service.login(store, sessions, username=payload.username, password=payload.password)
    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path="/",
    )
    return success_response()


@router.post("/logout", response_model=SuccessResponse)
def logout(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    sessions: SessionBackend = Depends(get_session_backend),
) -> SuccessResponse:
    """退出登录；未登录时同样返回成功。"""
    auth_service.logout(sessions, token)
    response.delete_cookie(get_settings().session_cookie_name, path="/")
    return success_response()
