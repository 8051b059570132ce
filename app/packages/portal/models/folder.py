"""文件夹模型。

``parent_id`` 只是弱引用，不建外键：删除父文件夹不会影响子文件夹，
悬空的父引用由服务层在写入时拦截。
"""

from typing import Optional

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.packages.portal.models.base import Base, CreatedAtMixin


class Folder(CreatedAtMixin, Base):
    __tablename__ = "folders"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    parent_id: Mapped[Optional[int]] = mapped_column(Integer, index=True, nullable=True)
