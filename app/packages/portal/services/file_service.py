"""文件管理服务：文件夹/文件记录的增删改查、上传落盘与打包下载。

元数据写入实体存储，字节写入 ``LocalFileStorage``。删除元数据后由本服务通知
文件存储清理对应字节；上传失败时回滚已写入的字节与记录。
"""

from __future__ import annotations

import io
import mimetypes
import zipfile
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any, Optional

from app.packages.portal.core.constants import DEFAULT_MIME_TYPE
from app.packages.portal.core.exceptions import BadRequestError, NotFoundError
from app.packages.portal.core.logger import logger
from app.packages.portal.services.file_storage import LocalFileStorage
from app.packages.portal.store.base import EntityStore, validate_file_fields
from app.packages.portal.store.entities import FileRecord, Folder


@dataclass
class UploadItem:
    """一次上传中的单个文件。``relative_path`` 为浏览器提供的相对路径，缺省时使用文件名。"""

    filename: str
    content: bytes
    content_type: Optional[str] = None
    relative_path: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


class FileService:
    # ---------------- 文件夹 ----------------
    def list_folders(self, store: EntityStore, parent_id: Optional[int] = None) -> list[Folder]:
        return store.list_folders(parent_id)

    def get_folder(self, store: EntityStore, folder_id: int) -> Folder:
        folder = store.get_folder(folder_id)
        if folder is None:
            raise NotFoundError("Folder not found")
        return folder

    def create_folder(
        self,
        store: EntityStore,
        *,
        name: str,
        description: Optional[str] = None,
        parent_id: Optional[int] = None,
    ) -> Folder:
        self._ensure_folder_exists(store, parent_id, "Parent folder not found")
        folder = store.create_folder(name=name, description=description, parent_id=parent_id)
        logger.info("Folder %s (%s) created under %s", folder.id, folder.name, parent_id)
        return folder

    def update_folder(self, store: EntityStore, folder_id: int, fields: dict[str, Any]) -> Folder:
        if store.get_folder(folder_id) is None:
            raise NotFoundError("Folder not found")
        if "parent_id" in fields:
            self._ensure_folder_exists(store, fields["parent_id"], "Parent folder not found")
        return store.update_folder(folder_id, **fields)

    def delete_folder(self, store: EntityStore, storage: LocalFileStorage, folder_id: int) -> None:
        """删除文件夹及其直接包含的文件；子文件夹不受影响。"""
        removed = store.delete_folder(folder_id)
        for record in removed:
            storage.delete(record.path)
        logger.info("Folder %s deleted with %s file(s)", folder_id, len(removed))

    # ---------------- 文件 ----------------
    def list_files(self, store: EntityStore, folder_id: Optional[int] = None) -> list[FileRecord]:
        return store.list_files(folder_id)

    def get_file(self, store: EntityStore, file_id: int) -> FileRecord:
        record = store.get_file(file_id)
        if record is None:
            raise NotFoundError("File not found")
        return record

    def update_file(self, store: EntityStore, file_id: int, fields: dict[str, Any]) -> FileRecord:
        if store.get_file(file_id) is None:
            raise NotFoundError("File not found")
        if "folder_id" in fields:
            self._ensure_folder_exists(store, fields["folder_id"], "Folder not found")
        return store.update_file(file_id, **fields)

    def delete_file(self, store: EntityStore, storage: LocalFileStorage, file_id: int) -> None:
        record = store.delete_file(file_id)
        if record is None:
            return
        storage.delete(record.path)
        logger.info("File %s (%s) deleted", record.id, record.path)

    def upload(
        self,
        store: EntityStore,
        storage: LocalFileStorage,
        *,
        items: list[UploadItem],
        folder_id: Optional[int] = None,
    ) -> list[FileRecord]:
        """保存一批上传文件。先整体校验，再写字节，最后建记录；任一步失败都会回滚。"""
        if not items:
            raise BadRequestError("No files uploaded")
        self._ensure_folder_exists(store, folder_id, "Folder not found")

        prepared: list[tuple[UploadItem, dict[str, Any]]] = []
        for item in items:
            key = storage.normalize(item.relative_path or item.filename)
            name = PurePosixPath((item.filename or key).replace("\\", "/")).name or PurePosixPath(key).name
            metadata = {
                "name": name,
                "type": item.content_type or mimetypes.guess_type(name)[0] or DEFAULT_MIME_TYPE,
                "size": item.size,
                "path": key,
                "folder_id": folder_id,
            }
            validate_file_fields(metadata, creating=True)
            prepared.append((item, metadata))

        written: list[str] = []
        created: list[FileRecord] = []
        try:
            for item, metadata in prepared:
                metadata["path"] = storage.save(metadata["path"], item.content)
                written.append(metadata["path"])
            for _, metadata in prepared:
                created.append(store.create_file(**metadata))
        except Exception:
            logger.warning("Upload failed, rolling back %s stored file(s)", len(written), exc_info=True)
            for record in created:
                store.delete_file(record.id)
            for key in written:
                storage.delete(key)
            raise

        logger.info("Uploaded %s file(s) into folder %s", len(created), folder_id)
        return created

    def build_archive(
        self,
        store: EntityStore,
        storage: LocalFileStorage,
        folder_id: Optional[int] = None,
    ) -> tuple[str, bytes]:
        """把文件夹（或根目录）下直接包含的文件打包为 ZIP，返回下载文件名与内容。"""
        archive_name = "files.zip"
        if folder_id is not None:
            archive_name = f"{self.get_folder(store, folder_id).name}.zip"

        buffer = io.BytesIO()
        used_names: set[str] = set()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for record in store.list_files(folder_id):
                try:
                    content = storage.read(record.path)
                except NotFoundError:
                    logger.warning("File %s missing in storage, skipped from archive", record.id)
                    continue
                archive.writestr(_unique_name(record.name, used_names), content)
        return archive_name, buffer.getvalue()

    @staticmethod
    def _ensure_folder_exists(store: EntityStore, folder_id: Optional[int], message: str) -> None:
        if folder_id is not None and store.get_folder(folder_id) is None:
            raise BadRequestError(message)


def _unique_name(name: str, used: set[str]) -> str:
    """返回压缩包内不重名、且不含目录成分的成员名。"""
    base = PurePosixPath(name.replace("\\", "/")).name
    if base in ("", ".", ".."):
        base = "file"
    candidate = base
    stem, suffix = PurePosixPath(base).stem, PurePosixPath(base).suffix
    counter = 1
    while candidate in used:
        candidate = f"{stem} ({counter}){suffix}"
        counter += 1
    used.add(candidate)
    return candidate


file_service = FileService()
