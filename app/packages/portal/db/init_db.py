"""Database bootstrapping utilities."""

from __future__ import annotations

import logging

from app.packages.portal.core.config import get_settings
from app.packages.portal.core.constants import STORAGE_BACKEND_DATABASE
from app.packages.portal.store import get_store
from app.packages.portal.store.base import EntityStore
from app.packages.portal.store.entities import User

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Create tables when the relational backend is active and seed the administrator."""
    settings = get_settings()
    if settings.storage_backend == STORAGE_BACKEND_DATABASE:
        from app.packages.portal.db import session as db_session
        from app.packages.portal.models.base import Base
        from app.packages.portal import models  # noqa: F401 - register tables

        Base.metadata.create_all(bind=db_session.engine)
    seed_admin(get_store(), username=settings.admin_username, password=settings.admin_password)


def seed_admin(store: EntityStore, *, username: str, password: str) -> User:
    """确保管理员账号存在；重复调用不会新建用户。"""
    existing = store.get_user_by_username(username)
    if existing is not None:
        if not existing.is_admin:
            # 管理员用户名被普通用户占用时拒绝启动
            raise RuntimeError(
                f"ADMIN_USERNAME '{username}' belongs to a non-admin user; choose another admin username"
            )
        return existing
    user = store.create_user(username, password, is_admin=True)
    logger.info("Seeded administrator account %s", username)
    return user
