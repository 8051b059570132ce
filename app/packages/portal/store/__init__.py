"""实体存储：按配置选择内存或关系库实现，并以依赖注入方式提供给路由。"""

from __future__ import annotations

from typing import Optional

from app.packages.portal.core.config import Settings, get_settings
from app.packages.portal.core.constants import STORAGE_BACKEND_DATABASE, STORAGE_BACKEND_MEMORY
from app.packages.portal.core.logger import logger
from app.packages.portal.store.base import EntityStore
from app.packages.portal.store.memory import MemoryStore


def build_store(settings: Settings) -> EntityStore:
    backend = settings.storage_backend
    if backend == STORAGE_BACKEND_DATABASE:
        from app.packages.portal.db import session as db_session
        from app.packages.portal.store.database import DatabaseStore

        logger.info("Entity store backed by database at %s", db_session.engine.url.render_as_string(hide_password=True))
        return DatabaseStore(db_session.SessionLocal)
    if backend != STORAGE_BACKEND_MEMORY:
        raise RuntimeError(f"Unknown STORAGE_BACKEND '{settings.storage_backend}', expected memory or database")
    logger.info("Entity store kept in process memory; data is lost on restart")
    return MemoryStore()


_store: Optional[EntityStore] = None


def get_store() -> EntityStore:
    """返回进程级实体存储。测试或多实例部署可通过依赖覆盖注入其它实例。"""
    global _store
    if _store is None:
        _store = build_store(get_settings())
    return _store


__all__ = ["EntityStore", "MemoryStore", "build_store", "get_store"]
