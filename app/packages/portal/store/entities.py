"""实体定义：存储层对外交付的值对象，与具体后端（内存/数据库）无关。"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class User:
    id: int
    username: str
    password_hash: str
    is_admin: bool = False


@dataclass
class WaitlistEntry:
    id: int
    email: str
    name: str
    company: Optional[str]
    created_at: datetime


@dataclass
class Folder:
    """文件夹节点；``parent_id`` 为空表示根节点。"""

    id: int
    name: str
    description: Optional[str]
    parent_id: Optional[int]
    created_at: datetime


@dataclass
class FileRecord:
    """上传文件的元数据；字节内容由文件存储负责，``path`` 为其存储位置。"""

    id: int
    name: str
    type: str
    size: int
    path: str
    folder_id: Optional[int]
    created_at: datetime
    updated_at: datetime
