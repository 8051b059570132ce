"""会话管理：使用 Redis 或内存后端实现固定有效期的登录会话。

会话自登录起计时，到期后无论期间是否有访问都会失效（不做滑动续期）。
"""

from __future__ import annotations

import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import redis

from app.packages.portal.core.config import Settings, get_settings
from app.packages.portal.core.constants import SESSION_BACKEND_REDIS
from app.packages.portal.core.logger import logger


class SessionBackend:
    """会话后端基类，定义创建、查询与销毁接口。"""

    def create_session(self, user_id: int, ttl_seconds: int) -> str:  # pragma: no cover - interface definition
        raise NotImplementedError

    def get_user_id(self, session_id: str) -> Optional[int]:  # pragma: no cover
        raise NotImplementedError

    def delete_session(self, session_id: str) -> None:  # pragma: no cover
        raise NotImplementedError


class RedisSessionBackend(SessionBackend):
    """基于 Redis 的会话后端，过期由 Redis TTL 负责。"""

    def __init__(self, url: str) -> None:
        self._client = redis.Redis.from_url(url, decode_responses=True)
        self._client.ping()

    def create_session(self, user_id: int, ttl_seconds: int) -> str:
        session_id = uuid.uuid4().hex
        self._client.set(self._build_key(session_id), str(user_id), ex=ttl_seconds)
        return session_id

    def get_user_id(self, session_id: str) -> Optional[int]:
        raw = self._client.get(self._build_key(session_id))
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            return None

    def delete_session(self, session_id: str) -> None:
        self._client.delete(self._build_key(session_id))

    @staticmethod
    def _build_key(session_id: str) -> str:
        return f"session:{session_id}"


class InMemorySessionBackend(SessionBackend):
    """内存后端，用于单进程部署、测试或缺少 Redis 时的回退实现。"""

    def __init__(self) -> None:
        self._store: dict[str, tuple[int, datetime]] = {}
        self._lock = threading.Lock()

    def create_session(self, user_id: int, ttl_seconds: int) -> str:
        session_id = uuid.uuid4().hex
        expires_at = self._now() + timedelta(seconds=ttl_seconds)
        with self._lock:
            self._purge_expired()
            self._store[session_id] = (user_id, expires_at)
        return session_id

    def get_user_id(self, session_id: str) -> Optional[int]:
        with self._lock:
            record = self._store.get(session_id)
            if record is None:
                return None
            user_id, expires_at = record
            if expires_at <= self._now():
                self._store.pop(session_id, None)
                return None
            return user_id

    def delete_session(self, session_id: str) -> None:
        with self._lock:
            self._store.pop(session_id, None)

    def _purge_expired(self) -> None:
        current = self._now()
        expired = [sid for sid, (_, expires_at) in self._store.items() if expires_at <= current]
        for sid in expired:
            del self._store[sid]

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)


def build_session_backend(settings: Settings) -> SessionBackend:
    """按配置创建会话后端；Redis 不可用时回退到内存实现。"""
    if settings.session_backend != SESSION_BACKEND_REDIS:
        return InMemorySessionBackend()
    try:
        backend = RedisSessionBackend(settings.redis_url)
        logger.info("Session store initialized with Redis at %s", settings.redis_url)
        return backend
    except redis.RedisError as exc:  # pragma: no cover - fallback path
        logger.warning("Redis unavailable (%s), falling back to in-memory session store", exc)
        return InMemorySessionBackend()


_backend: Optional[SessionBackend] = None


def get_session_backend() -> SessionBackend:
    """返回进程级会话后端，首次调用时按配置初始化。"""
    global _backend
    if _backend is None:
        _backend = build_session_backend(get_settings())
    return _backend
