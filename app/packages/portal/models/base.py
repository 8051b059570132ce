"""模型基类：统一声明式基类与通用时间戳字段。"""

from datetime import datetime

from sqlalchemy import DateTime, MetaData
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from app.packages.portal.core.timezone import now as tz_now

convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata_obj = MetaData(naming_convention=convention)


class Base(DeclarativeBase):
    """全局声明式基类，附带一致的命名约定，便于迁移与调试。"""

    metadata = metadata_obj


class CreatedAtMixin:
    """创建时间由应用写入（配置时区），与内存存储保持一致，之后不再修改。"""

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=tz_now, nullable=False)
