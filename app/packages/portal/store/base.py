"""实体存储接口：定义用户、候补名单、文件夹与文件记录的统一读写契约。

所有实现都必须满足：
- 各集合内 ID 唯一、单调递增，删除后不复用；
- ``created_at`` 创建后不可变，``FileRecord.updated_at`` 仅在元数据变更时刷新；
- 删除文件夹只级联删除直接位于该文件夹下的文件记录，不递归删除子文件夹；
- 校验失败在任何写入之前抛出，不产生部分写入。
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from app.packages.portal.core.exceptions import BadRequestError
from app.packages.portal.store.entities import FileRecord, Folder, User, WaitlistEntry

FOLDER_UPDATABLE_FIELDS = frozenset({"name", "description", "parent_id"})
FILE_UPDATABLE_FIELDS = frozenset({"name", "type", "size", "path", "folder_id"})


class EntityStore:
    """实体存储基类。子类实现具体的持久化方式。"""

    # ---------------- 用户 ----------------
    def create_user(self, username: str, password: str, *, is_admin: bool = False) -> User:  # pragma: no cover - interface definition
        raise NotImplementedError

    def get_user(self, user_id: int) -> Optional[User]:  # pragma: no cover
        raise NotImplementedError

    def get_user_by_username(self, username: str) -> Optional[User]:  # pragma: no cover
        raise NotImplementedError

    # ---------------- 候补名单 ----------------
    def create_waitlist_entry(self, email: str, name: str, company: Optional[str] = None) -> WaitlistEntry:  # pragma: no cover
        raise NotImplementedError

    def get_waitlist_entry(self, entry_id: int) -> Optional[WaitlistEntry]:  # pragma: no cover
        raise NotImplementedError

    def list_waitlist_entries(self) -> list[WaitlistEntry]:  # pragma: no cover
        raise NotImplementedError

    def delete_waitlist_entry(self, entry_id: int) -> None:  # pragma: no cover
        raise NotImplementedError

    # ---------------- 文件夹 ----------------
    def create_folder(
        self,
        name: str,
        description: Optional[str] = None,
        parent_id: Optional[int] = None,
    ) -> Folder:  # pragma: no cover
        raise NotImplementedError

    def get_folder(self, folder_id: int) -> Optional[Folder]:  # pragma: no cover
        raise NotImplementedError

    def list_folders(self, parent_id: Optional[int] = None) -> list[Folder]:  # pragma: no cover
        raise NotImplementedError

    def update_folder(self, folder_id: int, **fields: Any) -> Folder:  # pragma: no cover
        raise NotImplementedError

    def delete_folder(self, folder_id: int) -> list[FileRecord]:  # pragma: no cover
        """删除文件夹并返回被级联删除的文件记录，供调用方清理字节内容。"""
        raise NotImplementedError

    # ---------------- 文件记录 ----------------
    def create_file(
        self,
        *,
        name: str,
        type: str,
        size: int,
        path: str,
        folder_id: Optional[int] = None,
    ) -> FileRecord:  # pragma: no cover
        raise NotImplementedError

    def get_file(self, file_id: int) -> Optional[FileRecord]:  # pragma: no cover
        raise NotImplementedError

    def list_files(self, folder_id: Optional[int] = None) -> list[FileRecord]:  # pragma: no cover
        raise NotImplementedError

    def update_file(self, file_id: int, **fields: Any) -> FileRecord:  # pragma: no cover
        raise NotImplementedError

    def delete_file(self, file_id: int) -> Optional[FileRecord]:  # pragma: no cover
        raise NotImplementedError

    # ---------------- 公共校验 ----------------
    def ensure_no_folder_cycle(self, folder_id: int, new_parent_id: Optional[int]) -> None:
        """禁止把文件夹挂到自身或其后代之下。悬空的父引用视为链路终点。"""
        seen: set[int] = set()
        current = new_parent_id
        while current is not None and current not in seen:
            if current == folder_id:
                raise BadRequestError("A folder cannot be moved into itself or its descendants")
            seen.add(current)
            parent = self.get_folder(current)
            current = parent.parent_id if parent is not None else None


def validate_user_fields(username: str, password: str) -> None:
    if not (username or "").strip():
        raise BadRequestError("Username is required")
    if not password:
        raise BadRequestError("Password is required")


def validate_folder_fields(fields: dict[str, Any]) -> None:
    """校验文件夹字段（创建或部分更新）。"""
    _reject_unknown(fields, FOLDER_UPDATABLE_FIELDS)
    if "name" in fields:
        name = fields["name"]
        if not isinstance(name, str) or not name.strip():
            raise BadRequestError("Folder name is required")
    _check_optional_id(fields, "parent_id")


def validate_file_fields(fields: dict[str, Any], *, creating: bool = False) -> None:
    """校验文件元数据：名称与存储路径非空、大小为非负整数。"""
    _reject_unknown(fields, FILE_UPDATABLE_FIELDS)
    if creating:
        missing = [key for key in ("name", "type", "size", "path") if key not in fields]
        if missing:
            raise BadRequestError(f"Missing file metadata: {', '.join(missing)}")
    if "name" in fields:
        name = fields["name"]
        if not isinstance(name, str) or not name.strip():
            raise BadRequestError("File name is required")
        # 名称会成为下载文件名与压缩包成员名，不能带目录成分
        if "/" in name or "\\" in name or name.strip() in (".", ".."):
            raise BadRequestError("File name must not contain path separators")
    if "type" in fields and not isinstance(fields["type"], str):
        raise BadRequestError("File type must be a string")
    if "size" in fields:
        size = fields["size"]
        if isinstance(size, bool) or not isinstance(size, int) or size < 0:
            raise BadRequestError("File size must be a non-negative integer")
    if "path" in fields and (not isinstance(fields["path"], str) or not fields["path"].strip()):
        raise BadRequestError("File storage path is required")
    _check_optional_id(fields, "folder_id")


def newest_first(items: Iterable[Any], attr: str) -> list[Any]:
    """按时间字段倒序排列，时间相同则 ID 大者在前，保证排序稳定。"""
    return sorted(items, key=lambda item: (getattr(item, attr), item.id), reverse=True)


def _reject_unknown(fields: dict[str, Any], allowed: frozenset[str]) -> None:
    unknown = sorted(set(fields) - allowed)
    if unknown:
        raise BadRequestError(f"Unsupported fields: {', '.join(unknown)}")


def _check_optional_id(fields: dict[str, Any], key: str) -> None:
    if key not in fields or fields[key] is None:
        return
    value = fields[key]
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise BadRequestError(f"{key} must be a positive integer")
