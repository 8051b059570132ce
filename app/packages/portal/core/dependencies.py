"""依赖注入模块：封装 FastAPI 中复用度高的依赖函数。

实体存储、会话后端与文件存储都通过依赖提供，测试或多实例部署时可用
``app.dependency_overrides`` 替换为独立实例。
"""

from typing import Optional

from fastapi import Depends, Request

from app.packages.portal.core.config import get_settings
from app.packages.portal.core.session import SessionBackend, get_session_backend
from app.packages.portal.services.auth_service import auth_service
from app.packages.portal.services.file_storage import LocalFileStorage, get_file_storage
from app.packages.portal.store import get_store
from app.packages.portal.store.base import EntityStore
from app.packages.portal.store.entities import User

__all__ = [
    "get_store",
    "get_session_backend",
    "get_file_storage",
    "get_session_token",
    "require_authenticated",
    "EntityStore",
    "SessionBackend",
    "LocalFileStorage",
]


def get_session_token(request: Request) -> Optional[str]:
    """读取会话 Cookie 的原始值。"""
    return request.cookies.get(get_settings().session_cookie_name)


def require_authenticated(
    token: Optional[str] = Depends(get_session_token),
    store: EntityStore = Depends(get_store),
    sessions: SessionBackend = Depends(get_session_backend),
) -> User:
    """受保护路由的守卫：未登录、会话过期或 Cookie 被篡改时返回 401。"""
    return auth_service.authenticate(store, sessions, token)
