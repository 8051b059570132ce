"""关系库实体存储的单元测试（SQLite 临时文件）。"""

from typing import Generator

import pytest
from sqlalchemy.orm import sessionmaker

from app.packages.portal import models  # noqa: F401 - register tables
from app.packages.portal.core.exceptions import BadRequestError, NotFoundError
from app.packages.portal.db.init_db import seed_admin
from app.packages.portal.db.session import build_engine
from app.packages.portal.models.base import Base
from app.packages.portal.store.database import DatabaseStore


@pytest.fixture()
def db_store(tmp_path) -> Generator[DatabaseStore, None, None]:
    engine = build_engine(f"sqlite:///{tmp_path / 'portal.db'}")
    Base.metadata.create_all(bind=engine)
    yield DatabaseStore(sessionmaker(autocommit=False, autoflush=False, bind=engine))
    engine.dispose()


def test_seed_admin_is_idempotent(db_store: DatabaseStore):
    first = seed_admin(db_store, username="admin", password="admin123")
    second = seed_admin(db_store, username="admin", password="admin123")
    assert first.id == second.id
    assert second.is_admin is True
    with pytest.raises(BadRequestError):
        db_store.create_user("admin", "other")


def test_waitlist_newest_first_and_unique_email(db_store: DatabaseStore):
    first = db_store.create_waitlist_entry("a@example.com", "Alice", "Acme")
    second = db_store.create_waitlist_entry("b@example.com", "Bob")

    entries = db_store.list_waitlist_entries()
    assert [entry.id for entry in entries] == [second.id, first.id]
    assert entries[1].company == "Acme"

    with pytest.raises(BadRequestError):
        db_store.create_waitlist_entry("a@example.com", "Again")
    assert len(db_store.list_waitlist_entries()) == 2


def test_waitlist_ids_are_not_reused(db_store: DatabaseStore):
    entry = db_store.create_waitlist_entry("a@example.com", "Alice")
    db_store.delete_waitlist_entry(entry.id)
    db_store.delete_waitlist_entry(entry.id)
    again = db_store.create_waitlist_entry("a@example.com", "Alice")
    assert again.id > entry.id


def test_folder_listing_and_cascade(db_store: DatabaseStore, clock):
    folder_a = db_store.create_folder("A", description="top")
    folder_b = db_store.create_folder("B", parent_id=folder_a.id)
    in_a = db_store.create_file(name="a.txt", type="text/plain", size=1, path="a.txt", folder_id=folder_a.id)
    at_root = db_store.create_file(name="r.txt", type="text/plain", size=1, path="r.txt")

    assert [f.id for f in db_store.list_folders()] == [folder_a.id]
    assert [f.id for f in db_store.list_folders(folder_a.id)] == [folder_b.id]

    removed = db_store.delete_folder(folder_a.id)

    assert [r.id for r in removed] == [in_a.id]
    assert db_store.get_folder(folder_b.id) is not None
    assert db_store.get_file(in_a.id) is None
    assert db_store.get_file(at_root.id) is not None


def test_update_folder(db_store: DatabaseStore):
    parent = db_store.create_folder("Parent")
    child = db_store.create_folder("Child", parent_id=parent.id)

    renamed = db_store.update_folder(child.id, name="Renamed", parent_id=None)
    assert renamed.name == "Renamed"
    assert renamed.parent_id is None
    assert renamed.created_at == child.created_at

    db_store.update_folder(child.id, parent_id=parent.id)
    with pytest.raises(BadRequestError):
        db_store.update_folder(parent.id, parent_id=child.id)
    with pytest.raises(NotFoundError):
        db_store.update_folder(999, name="x")


def test_file_round_trip_and_update(db_store: DatabaseStore, clock):
    record = db_store.create_file(name="doc.pdf", type="application/pdf", size=10, path="docs/doc.pdf")
    assert db_store.get_file(record.id) == record

    updated = db_store.update_file(record.id, name="renamed.pdf")
    assert updated.name == "renamed.pdf"
    assert updated.created_at == record.created_at
    assert updated.updated_at > record.updated_at

    with pytest.raises(BadRequestError):
        db_store.create_file(name="bad", type="text/plain", size=-1, path="bad")
    assert [r.id for r in db_store.list_files()] == [record.id]

    assert db_store.delete_file(record.id).id == record.id
    assert db_store.delete_file(record.id) is None
