"""Database engine and session factory configuration."""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from app.packages.portal.core.config import get_settings


def build_engine(url: str, *, echo: bool = False) -> Engine:
    """创建引擎；SQLite 需要允许跨线程使用同一连接池。"""
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, pool_pre_ping=True, echo=echo, connect_args=connect_args)


settings = get_settings()

engine = build_engine(settings.database_url, echo=settings.database_echo)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
