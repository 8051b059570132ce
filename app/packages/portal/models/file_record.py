"""文件上传记录模型。"""

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.packages.portal.core.timezone import now as tz_now
from app.packages.portal.models.base import Base, CreatedAtMixin


class FileRecord(CreatedAtMixin, Base):
    __tablename__ = "files"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(255), nullable=False)
    size: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
    # 相对上传根目录的存储路径
    path: Mapped[str] = mapped_column(String(1024), nullable=False)
    folder_id: Mapped[Optional[int]] = mapped_column(Integer, index=True, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=tz_now, nullable=False)
