"""本地文件存储：负责上传文件字节的落盘、读取与删除。

存储路径沿用上传时的相对路径（例如浏览器目录上传的 ``docs/a.txt``），
全部位于 ``UPLOAD_DIR`` 之下；元数据由实体存储维护，本模块只处理字节。
这些方法都会阻塞，异步路由需通过线程池调用。
"""

from __future__ import annotations

import uuid
from pathlib import Path, PurePosixPath
from typing import Optional

from fastapi import status

from app.packages.portal.core.config import get_settings
from app.packages.portal.core.exceptions import AppException, BadRequestError, NotFoundError
from app.packages.portal.core.logger import logger

_WRITE_ATTEMPTS = 3


class LocalFileStorage:
    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:  # pragma: no cover - 极端情况下可能失败
            raise AppException(f"Cannot create upload directory: {exc}", status.HTTP_500_INTERNAL_SERVER_ERROR) from exc

    @staticmethod
    def normalize(relative_path: str) -> str:
        """把客户端提供的相对路径规整为 ``a/b/c.txt`` 形式，拒绝空路径与 ``..``。"""
        raw = (relative_path or "").replace("\\", "/").strip()
        parts = [part for part in PurePosixPath(raw).parts if part not in ("", "/", ".")]
        if not parts:
            raise BadRequestError("File path is required")
        if any(part == ".." for part in parts):
            raise BadRequestError("Illegal file path")
        return "/".join(parts)

    # 统一的安全路径拼接，防止路径遍历
    def resolve(self, relative_path: str) -> Path:
        candidate = (self.root / self.normalize(relative_path)).resolve()
        try:
            candidate.relative_to(self.root)
        except ValueError as exc:
            raise BadRequestError("Illegal file path") from exc
        return candidate

    def exists(self, relative_path: str) -> bool:
        return self.resolve(relative_path).is_file()

    def save(self, relative_path: str, content: bytes) -> str:
        """写入文件并返回实际使用的相对路径；同名文件已存在时在文件名前加唯一前缀。"""
        key = self.normalize(relative_path)
        target = self.resolve(key)
        if target.exists():
            directory, _, filename = key.rpartition("/")
            unique_name = f"{uuid.uuid4().hex[:8]}_{filename}"
            key = f"{directory}/{unique_name}" if directory else unique_name
            target = self.resolve(key)
        self._write_new(target, content)
        logger.debug("Stored %s bytes at %s", len(content), key)
        return key

    def _write_new(self, target: Path, content: bytes) -> None:
        # 并发的 delete 可能在 mkdir 与 open 之间清理掉刚建好的空目录，重建后重试
        for attempt in range(_WRITE_ATTEMPTS):
            target.parent.mkdir(parents=True, exist_ok=True)
            try:
                with open(target, "xb") as fh:
                    fh.write(content)
                return
            except FileNotFoundError:
                if attempt == _WRITE_ATTEMPTS - 1:
                    raise
                logger.debug("Upload directory %s vanished, retrying", target.parent)

    def read(self, relative_path: str) -> bytes:
        target = self.resolve(relative_path)
        if not target.is_file():
            raise NotFoundError("File content not found in storage")
        return target.read_bytes()

    def open_path(self, relative_path: str) -> Path:
        """返回可直接交给 ``FileResponse`` 的绝对路径。"""
        target = self.resolve(relative_path)
        if not target.is_file():
            raise NotFoundError("File content not found in storage")
        return target

    def delete(self, relative_path: str) -> None:
        """删除文件字节，不存在时忽略；随后清理因此变空的上级目录。"""
        try:
            target = self.resolve(relative_path)
        except BadRequestError:
            logger.warning("Skip deleting file with illegal path %r", relative_path)
            return
        if target.is_file():
            target.unlink()
        self._prune_empty_dirs(target.parent)

    def _prune_empty_dirs(self, directory: Path) -> None:
        current = directory
        while current != self.root and self.root in current.parents:
            try:
                current.rmdir()
            except OSError:
                break
            current = current.parent


_storage: Optional[LocalFileStorage] = None


def get_file_storage() -> LocalFileStorage:
    global _storage
    if _storage is None:
        _storage = LocalFileStorage(get_settings().upload_directory)
    return _storage
