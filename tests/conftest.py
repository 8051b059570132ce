"""测试夹具：为 pytest 提供独立的实体存储、会话后端、上传目录与客户端。"""

from datetime import datetime, timedelta, timezone
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.packages.portal.core.dependencies import get_file_storage, get_session_backend, get_store
from app.packages.portal.core.session import InMemorySessionBackend
from app.packages.portal.db.init_db import seed_admin
from app.packages.portal.services.file_storage import LocalFileStorage
from app.packages.portal.store.memory import MemoryStore

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"


class FakeClock:
    """可手动推进的时钟，保证按时间排序的断言稳定。"""

    def __init__(self) -> None:
        self.current = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture()
def clock(monkeypatch) -> FakeClock:
    fake = FakeClock()
    monkeypatch.setattr("app.packages.portal.store.memory.tz_now", fake)
    monkeypatch.setattr("app.packages.portal.store.database.tz_now", fake)
    return fake


@pytest.fixture()
def store() -> MemoryStore:
    """已写入管理员账号的全新内存存储。"""
    memory_store = MemoryStore()
    seed_admin(memory_store, username=ADMIN_USERNAME, password=ADMIN_PASSWORD)
    return memory_store


@pytest.fixture()
def sessions() -> InMemorySessionBackend:
    return InMemorySessionBackend()


@pytest.fixture()
def file_storage(tmp_path) -> LocalFileStorage:
    return LocalFileStorage(tmp_path / "uploads")


@pytest.fixture()
def client(store, sessions, file_storage) -> Generator[TestClient, None, None]:
    """构建 FastAPI TestClient，并注入测试专用的存储依赖。"""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_session_backend] = lambda: sessions
    app.dependency_overrides[get_file_storage] = lambda: file_storage

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def admin_client(client: TestClient) -> TestClient:
    """已通过管理员登录、Cookie 中携带会话的客户端。"""
    response = client.post(
        "/api/auth/login",
        json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return client
