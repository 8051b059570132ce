"""配置：环境变量与 .env 文件合并为一个缓存的 ``Settings`` 实例。

加载顺序（后者覆盖前者）：``.env`` → ``.env.<ENVIRONMENT>``；设置 ``ENV_FILE``
时只加载该文件。已存在的进程环境变量不会被 ``.env`` 覆盖。
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# 本文件位于 <root>/app/packages/portal/core/config.py
BASE_DIR = Path(__file__).resolve().parents[4]

_TRUTHY = {"1", "true", "yes", "on"}


def _env_files() -> list[tuple[Path, bool]]:
    """返回待加载的环境文件及是否覆盖已有变量。"""
    explicit = os.getenv("ENV_FILE")
    if explicit:
        return [(BASE_DIR / explicit, True)]

    files = [(BASE_DIR / ".env", False)]
    environment = os.getenv("ENVIRONMENT")
    if environment is None and (os.getenv("DEBUG") or "").strip().lower() in _TRUTHY:
        environment = "development"
    if environment:
        name = environment if environment.startswith(".env") else f".env.{environment}"
        files.append((BASE_DIR / name, True))
    return files


for _path, _override in _env_files():
    if _path.is_file():
        load_dotenv(_path, override=_override, encoding="utf-8")


class Settings(BaseSettings):
    """门户服务的全部可配置项，字段别名即环境变量名。"""

    project_name: str = Field(default="ZeroDigit Portal API", alias="PROJECT_NAME")
    api_prefix: str = Field(default="/api", alias="API_PREFIX")
    debug: bool = Field(default=False, alias="DEBUG")
    app_port: int = Field(default=8000, alias="APP_PORT")
    cors_origins_raw: str = Field(default="http://localhost:5173", alias="CORS_ORIGINS")

    # 实体存储：memory 为进程内存（重启即丢失），database 为 SQLAlchemy 关系库
    storage_backend: str = Field(default="memory", alias="STORAGE_BACKEND")
    database_url: str = Field(default="sqlite:///./portal.db", alias="DATABASE_URL")
    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")

    session_backend: str = Field(default="memory", alias="SESSION_BACKEND")
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_db: int = Field(default=0, alias="REDIS_DB")

    session_secret_key: str = Field(default="changeme", alias="SESSION_SECRET_KEY")
    session_algorithm: str = Field(default="HS256", alias="SESSION_ALGORITHM")
    session_cookie_name: str = Field(default="portal_session", alias="SESSION_COOKIE_NAME")
    session_cookie_secure: bool = Field(default=False, alias="SESSION_COOKIE_SECURE")
    session_expire_hours: int = Field(default=24, alias="SESSION_EXPIRE_HOURS")

    upload_dir: str = Field(default="uploads", alias="UPLOAD_DIR")

    admin_username: str = Field(default="admin", alias="ADMIN_USERNAME")
    admin_password: str = Field(default="admin123", alias="ADMIN_PASSWORD")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_dir: str = Field(default="log", alias="LOG_DIR")
    log_file_name: str = Field(default="app.log", alias="LOG_FILE_NAME")
    log_json: bool = Field(default=False, alias="LOG_JSON")
    timezone: str = Field(default="UTC", alias="TIMEZONE")

    model_config = SettingsConfigDict(extra="ignore")

    @field_validator("storage_backend", "session_backend", "log_level", mode="before")
    @classmethod
    def _normalize_choice(cls, value: Optional[str], info):
        if value is None:
            return value
        value = str(value).strip()
        return value.upper() if info.field_name == "log_level" else value.lower()

    @property
    def redis_url(self) -> str:
        """根据当前配置生成 Redis 连接地址。"""
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    @property
    def session_ttl_seconds(self) -> int:
        return max(self.session_expire_hours, 1) * 3600

    def _resolve_path(self, raw: str) -> Path:
        path = Path(raw)
        if not path.is_absolute():
            path = BASE_DIR / path
        return path

    @property
    def upload_directory(self) -> Path:
        """返回上传文件根目录的绝对路径。"""
        return self._resolve_path(self.upload_dir)

    @property
    def log_directory(self) -> Path:
        """返回日志目录的绝对路径，支持相对路径配置。"""
        return self._resolve_path(self.log_dir)

    @property
    def log_file_path(self) -> Path:
        return self.log_directory / self.log_file_name

    @property
    def timezone_info(self) -> ZoneInfo:
        """返回当前配置对应的时区信息，无法解析时回退到 UTC。"""
        try:
            return ZoneInfo(self.timezone)
        except ZoneInfoNotFoundError:
            return ZoneInfo("UTC")

    @property
    def cors_origins(self) -> list[str]:
        raw = (self.cors_origins_raw or "").strip()
        return [item.strip() for item in raw.split(",") if item.strip()]


@lru_cache
def get_settings() -> Settings:
    """返回单例化的配置对象，避免重复解析环境变量造成性能浪费。"""
    return Settings()
