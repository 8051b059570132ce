"""文件记录的请求/响应模型。"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from app.packages.portal.api.v1.schemas.common import CamelModel


class FileUpdate(CamelModel):
    """文件元数据部分更新；大小与存储路径由上传流程维护，不对外开放修改。"""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    type: Optional[str] = Field(default=None, min_length=1, max_length=255)
    folder_id: Optional[int] = Field(default=None, ge=1)


class FileRecordOut(CamelModel):
    id: int
    name: str
    type: str
    size: int
    path: str
    folder_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
