"""认证服务：封装登录、退出与会话校验流程。"""

from typing import Optional

from app.packages.portal.core.config import get_settings
from app.packages.portal.core.constants import MSG_INVALID_CREDENTIALS, MSG_UNAUTHORIZED
from app.packages.portal.core.exceptions import UnauthorizedError
from app.packages.portal.core.logger import logger
from app.packages.portal.core.security import create_session_token, decode_session_token, verify_password
from app.packages.portal.core.session import SessionBackend
from app.packages.portal.store.base import EntityStore
from app.packages.portal.store.entities import User


class AuthService:
    """会话闸门：匿名请求只有通过管理员登录才能进入已认证状态。"""

    def login(self, store: EntityStore, sessions: SessionBackend, *, username: str, password: str) -> str:
        """校验凭证并创建会话，返回写入 Cookie 的签名令牌。

        用户不存在、密码错误、非管理员三种情况返回同一错误，避免泄露用户名是否存在。
        """
        user = store.get_user_by_username(username)
        if user is None or not verify_password(password, user.password_hash) or not user.is_admin:
            logger.info("Rejected login attempt for %r", username)
            raise UnauthorizedError(MSG_INVALID_CREDENTIALS)

        session_id = sessions.create_session(user.id, get_settings().session_ttl_seconds)
        logger.info("User %s logged in", user.username)
        return create_session_token(session_id)

    def logout(self, sessions: SessionBackend, token: Optional[str]) -> None:
        """销毁会话；没有会话或令牌无效时什么也不做。"""
        if not token:
            return
        session_id = decode_session_token(token)
        if session_id:
            sessions.delete_session(session_id)

    def authenticate(self, store: EntityStore, sessions: SessionBackend, token: Optional[str]) -> User:
        """返回当前会话对应的用户，任何环节失败都抛出 401。"""
        if not token:
            raise UnauthorizedError(MSG_UNAUTHORIZED)
        session_id = decode_session_token(token)
        if session_id is None:
            raise UnauthorizedError(MSG_UNAUTHORIZED)
        user_id = sessions.get_user_id(session_id)
        if user_id is None:
            raise UnauthorizedError(MSG_UNAUTHORIZED)
        user = store.get_user(user_id)
        if user is None or not user.is_admin:
            sessions.delete_session(session_id)
            raise UnauthorizedError(MSG_UNAUTHORIZED)
        return user


auth_service = AuthService()
