"""安全模块：提供密码哈希、验证以及会话 Cookie 的签名/解析能力。"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from .config import get_settings
from .logger import logger


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """校验明文密码与已存储哈希值是否匹配。"""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # 存储值不是合法的 bcrypt 哈希
        return False


def get_password_hash(password: str) -> str:
    """对输入密码执行 bcrypt 哈希并返回可持久化的字符串。"""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def create_session_token(session_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """把会话 ID 包装为带过期时间的签名令牌，作为 Cookie 值下发。

    令牌本身不携带用户信息，服务端仍以会话存储为准。
    """
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta if expires_delta else timedelta(seconds=settings.session_ttl_seconds)
    )
    payload = {"sid": session_id, "exp": expire}
    return jwt.encode(payload, settings.session_secret_key, algorithm=settings.session_algorithm)


def decode_session_token(token: str) -> Optional[str]:
    """校验签名与过期时间，合法时返回其中的会话 ID，否则返回 ``None``。"""
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.session_secret_key,
            algorithms=[settings.session_algorithm],
        )
    except JWTError as exc:
        logger.warning("Rejected session cookie: %s", exc)
        return None
    session_id = payload.get("sid")
    if not isinstance(session_id, str) or not session_id:
        return None
    return session_id
