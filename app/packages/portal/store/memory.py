"""内存实体存储：以字典保存各集合，进程重启后数据丢失。

所有读写都在同一把可重入锁内完成，FastAPI 线程池中的并发请求不会交错修改同一集合。
返回值均为副本，调用方修改返回对象不会影响存储中的记录。
"""

from __future__ import annotations

import threading
from dataclasses import replace
from itertools import count
from typing import Any, Optional

from app.packages.portal.core.exceptions import BadRequestError, NotFoundError
from app.packages.portal.core.security import get_password_hash
from app.packages.portal.core.timezone import now as tz_now
from app.packages.portal.store.base import (
    EntityStore,
    newest_first,
    validate_file_fields,
    validate_folder_fields,
    validate_user_fields,
)
from app.packages.portal.store.entities import FileRecord, Folder, User, WaitlistEntry


class MemoryStore(EntityStore):
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._users: dict[int, User] = {}
        self._waitlist: dict[int, WaitlistEntry] = {}
        self._folders: dict[int, Folder] = {}
        self._files: dict[int, FileRecord] = {}
        # 计数器只增不减，删除后的 ID 不会被复用
        self._user_ids = count(1)
        self._waitlist_ids = count(1)
        self._folder_ids = count(1)
        self._file_ids = count(1)

    # ---------------- 用户 ----------------
    def create_user(self, username: str, password: str, *, is_admin: bool = False) -> User:
        validate_user_fields(username, password)
        password_hash = get_password_hash(password)
        with self._lock:
            if self._find_user(username) is not None:
                raise BadRequestError("Username already exists")
            user = User(
                id=next(self._user_ids),
                username=username,
                password_hash=password_hash,
                is_admin=is_admin,
            )
            self._users[user.id] = user
            return replace(user)

    def get_user(self, user_id: int) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return replace(user) if user else None

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            user = self._find_user(username)
            return replace(user) if user else None

    def _find_user(self, username: str) -> Optional[User]:
        return next((user for user in self._users.values() if user.username == username), None)

    # ---------------- 候补名单 ----------------
    def create_waitlist_entry(self, email: str, name: str, company: Optional[str] = None) -> WaitlistEntry:
        with self._lock:
            if any(entry.email == email for entry in self._waitlist.values()):
                raise BadRequestError("Email is already on the waitlist")
            entry = WaitlistEntry(
                id=next(self._waitlist_ids),
                email=email,
                name=name,
                company=company,
                created_at=tz_now(),
            )
            self._waitlist[entry.id] = entry
            return replace(entry)

    def get_waitlist_entry(self, entry_id: int) -> Optional[WaitlistEntry]:
        with self._lock:
            entry = self._waitlist.get(entry_id)
            return replace(entry) if entry else None

    def list_waitlist_entries(self) -> list[WaitlistEntry]:
        with self._lock:
            return [replace(entry) for entry in newest_first(self._waitlist.values(), "created_at")]

    def delete_waitlist_entry(self, entry_id: int) -> None:
        with self._lock:
            self._waitlist.pop(entry_id, None)

    # ---------------- 文件夹 ----------------
    def create_folder(
        self,
        name: str,
        description: Optional[str] = None,
        parent_id: Optional[int] = None,
    ) -> Folder:
        validate_folder_fields({"name": name, "description": description, "parent_id": parent_id})
        with self._lock:
            folder = Folder(
                id=next(self._folder_ids),
                name=name,
                description=description,
                parent_id=parent_id,
                created_at=tz_now(),
            )
            self._folders[folder.id] = folder
            return replace(folder)

    def get_folder(self, folder_id: int) -> Optional[Folder]:
        with self._lock:
            folder = self._folders.get(folder_id)
            return replace(folder) if folder else None

    def list_folders(self, parent_id: Optional[int] = None) -> list[Folder]:
        with self._lock:
            matched = [folder for folder in self._folders.values() if folder.parent_id == parent_id]
            return [replace(folder) for folder in newest_first(matched, "created_at")]

    def update_folder(self, folder_id: int, **fields: Any) -> Folder:
        validate_folder_fields(fields)
        with self._lock:
            folder = self._folders.get(folder_id)
            if folder is None:
                raise NotFoundError("Folder not found")
            if "parent_id" in fields:
                self.ensure_no_folder_cycle(folder_id, fields["parent_id"])
            updated = replace(folder, **fields)
            self._folders[folder_id] = updated
            return replace(updated)

    def delete_folder(self, folder_id: int) -> list[FileRecord]:
        with self._lock:
            if self._folders.pop(folder_id, None) is None:
                return []
            # 仅删除直接位于该文件夹下的文件；子文件夹保留
            removed = [record for record in self._files.values() if record.folder_id == folder_id]
            for record in removed:
                del self._files[record.id]
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
        validate_file_fields(
            {"name": name, "type": type, "size": size, "path": path, "folder_id": folder_id},
            creating=True,
        )
        with self._lock:
            timestamp = tz_now()
            record = FileRecord(
                id=next(self._file_ids),
                name=name,
                type=type,
                size=size,
                path=path,
                folder_id=folder_id,
                created_at=timestamp,
                updated_at=timestamp,
            )
            self._files[record.id] = record
            return replace(record)

    def get_file(self, file_id: int) -> Optional[FileRecord]:
        with self._lock:
            record = self._files.get(file_id)
            return replace(record) if record else None

    def list_files(self, folder_id: Optional[int] = None) -> list[FileRecord]:
        with self._lock:
            matched = [record for record in self._files.values() if record.folder_id == folder_id]
            return [replace(record) for record in newest_first(matched, "updated_at")]

    def update_file(self, file_id: int, **fields: Any) -> FileRecord:
        validate_file_fields(fields)
        with self._lock:
            record = self._files.get(file_id)
            if record is None:
                raise NotFoundError("File not found")
            updated = replace(record, **fields, updated_at=tz_now())
            self._files[file_id] = updated
            return replace(updated)

    def delete_file(self, file_id: int) -> Optional[FileRecord]:
        with self._lock:
            return self._files.pop(file_id, None)
