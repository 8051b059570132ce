"""文件夹的请求/响应模型。"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from app.packages.portal.api.v1.schemas.common import CamelModel


class FolderCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    parent_id: Optional[int] = Field(default=None, ge=1)


class FolderUpdate(CamelModel):
    """部分更新：只有显式传入的字段会被合并，``parentId: null`` 表示移动到根目录。"""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    parent_id: Optional[int] = Field(default=None, ge=1)


class FolderOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    parent_id: Optional[int] = None
    created_at: datetime
