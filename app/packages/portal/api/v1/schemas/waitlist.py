"""候补名单的请求/响应模型。"""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from app.packages.portal.api.v1.schemas.common import CamelModel


class WaitlistCreate(CamelModel):
    email: EmailStr
    name: str = Field(..., min_length=2, max_length=255)
    company: Optional[str] = Field(default=None, max_length=255)


class WaitlistEntryOut(CamelModel):
    id: int
    email: str
    name: str
    company: Optional[str] = None
    created_at: datetime
