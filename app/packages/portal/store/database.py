"""关系库实体存储：通过 SQLAlchemy 读写 users/waitlist/folders/files 四张表。

每个操作使用独立的数据库会话并在结束前提交，返回与内存存储相同的实体对象。
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from app.packages.portal import models
from app.packages.portal.core.exceptions import BadRequestError, NotFoundError
from app.packages.portal.core.logger import logger
from app.packages.portal.core.security import get_password_hash
from app.packages.portal.core.timezone import now as tz_now, to_local
from app.packages.portal.crud.file_records import file_record_crud
from app.packages.portal.crud.folders import folder_crud
from app.packages.portal.crud.users import user_crud
from app.packages.portal.crud.waitlist import waitlist_crud
from app.packages.portal.store.base import (
    EntityStore,
    validate_file_fields,
    validate_folder_fields,
    validate_user_fields,
)
from app.packages.portal.store.entities import FileRecord, Folder, User, WaitlistEntry


def _to_user(row: models.User) -> User:
    return User(id=row.id, username=row.username, password_hash=row.password_hash, is_admin=bool(row.is_admin))


def _to_waitlist_entry(row: models.WaitlistEntry) -> WaitlistEntry:
    return WaitlistEntry(
        id=row.id,
        email=row.email,
        name=row.name,
        company=row.company,
        created_at=to_local(row.created_at),
    )


def _to_folder(row: models.Folder) -> Folder:
    return Folder(
        id=row.id,
        name=row.name,
        description=row.description,
        parent_id=row.parent_id,
        created_at=to_local(row.created_at),
    )


def _to_file(row: models.FileRecord) -> FileRecord:
    return FileRecord(
        id=row.id,
        name=row.name,
        type=row.type,
        size=row.size,
        path=row.path,
        folder_id=row.folder_id,
        created_at=to_local(row.created_at),
        updated_at=to_local(row.updated_at),
    )


class DatabaseStore(EntityStore):
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def _session(self) -> Session:
        return self._session_factory()

    # ---------------- 用户 ----------------
    def create_user(self, username: str, password: str, *, is_admin: bool = False) -> User:
        validate_user_fields(username, password)
        with self._session() as db:
            if user_crud.get_by_username(db, username) is not None:
                raise BadRequestError("Username already exists")
            payload = {
                "username": username,
                "password_hash": get_password_hash(password),
                "is_admin": is_admin,
            }
            try:
                row = user_crud.create(db, payload)
            except IntegrityError as exc:
                db.rollback()
                raise BadRequestError("Username already exists") from exc
            return _to_user(row)

    def get_user(self, user_id: int) -> Optional[User]:
        with self._session() as db:
            row = user_crud.get(db, user_id)
            return _to_user(row) if row else None

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._session() as db:
            row = user_crud.get_by_username(db, username)
            return _to_user(row) if row else None

    # ---------------- 候补名单 ----------------
    def create_waitlist_entry(self, email: str, name: str, company: Optional[str] = None) -> WaitlistEntry:
        with self._session() as db:
            if waitlist_crud.get_by_email(db, email) is not None:
                raise BadRequestError("Email is already on the waitlist")
            try:
                row = waitlist_crud.create(db, {"email": email, "name": name, "company": company})
            except IntegrityError as exc:
                db.rollback()
                logger.info("Waitlist insert rejected by unique constraint: %s", email)
                raise BadRequestError("Email is already on the waitlist") from exc
            return _to_waitlist_entry(row)

    def get_waitlist_entry(self, entry_id: int) -> Optional[WaitlistEntry]:
        with self._session() as db:
            row = waitlist_crud.get(db, entry_id)
            return _to_waitlist_entry(row) if row else None

    def list_waitlist_entries(self) -> list[WaitlistEntry]:
        with self._session() as db:
            return [_to_waitlist_entry(row) for row in waitlist_crud.list_newest_first(db)]

    def delete_waitlist_entry(self, entry_id: int) -> None:
        with self._session() as db:
            row = waitlist_crud.get(db, entry_id)
            if row is not None:
                waitlist_crud.hard_delete(db, row)

    # ---------------- 文件夹 ----------------
    def create_folder(
        self,
        name: str,
        description: Optional[str] = None,
        parent_id: Optional[int] = None,
    ) -> Folder:
        validate_folder_fields({"name": name, "description": description, "parent_id": parent_id})
        with self._session() as db:
            row = folder_crud.create(db, {"name": name, "description": description, "parent_id": parent_id})
            return _to_folder(row)

    def get_folder(self, folder_id: int) -> Optional[Folder]:
        with self._session() as db:
            row = folder_crud.get(db, folder_id)
            return _to_folder(row) if row else None

    def list_folders(self, parent_id: Optional[int] = None) -> list[Folder]:
        with self._session() as db:
            return [_to_folder(row) for row in folder_crud.list_by_parent(db, parent_id)]

    def update_folder(self, folder_id: int, **fields: Any) -> Folder:
        validate_folder_fields(fields)
        with self._session() as db:
            row = folder_crud.get(db, folder_id)
            if row is None:
                raise NotFoundError("Folder not found")
            if "parent_id" in fields:
                self.ensure_no_folder_cycle(folder_id, fields["parent_id"])
            for key, value in fields.items():
                setattr(row, key, value)
            return _to_folder(folder_crud.save(db, row))

    def delete_folder(self, folder_id: int) -> list[FileRecord]:
        with self._session() as db:
            row = folder_crud.get(db, folder_id)
            if row is None:
                return []
            removed = [_to_file(item) for item in file_record_crud.delete_by_folder(db, folder_id)]
            folder_crud.hard_delete(db, row)
            return removed

    # ---------------- 文件记录 ----------------
    def create_file(
        self,
        *,
        name: str,
        type: str,
        size: int,
        path: str,
        folder_id: Optional[int] = None,
    ) -> FileRecord:
        payload = {"name": name, "type": type, "size": size, "path": path, "folder_id": folder_id}
        validate_file_fields(payload, creating=True)
        timestamp = tz_now()
        with self._session() as db:
            row = file_record_crud.create(db, {**payload, "created_at": timestamp, "updated_at": timestamp})
            return _to_file(row)

    def get_file(self, file_id: int) -> Optional[FileRecord]:
        with self._session() as db:
            row = file_record_crud.get(db, file_id)
            return _to_file(row) if row else None

    def list_files(self, folder_id: Optional[int] = None) -> list[FileRecord]:
        with self._session() as db:
            return [_to_file(row) for row in file_record_crud.list_by_folder(db, folder_id)]

    def update_file(self, file_id: int, **fields: Any) -> FileRecord:
        validate_file_fields(fields)
        with self._session() as db:
            row = file_record_crud.get(db, file_id)
            if row is None:
                raise NotFoundError("File not found")
            for key, value in fields.items():
                setattr(row, key, value)
            row.updated_at = tz_now()
            return _to_file(file_record_crud.save(db, row))

    def delete_file(self, file_id: int) -> Optional[FileRecord]:
        with self._session() as db:
            row = file_record_crud.get(db, file_id)
            if row is None:
                return None
            removed = _to_file(row)
            file_record_crud.hard_delete(db, row)
            return removed
