"""模型包初始化，便于统一导入 ORM 实体并触发模型注册。"""

from app.packages.portal.models.file_record import FileRecord
from app.packages.portal.models.folder import Folder
from app.packages.portal.models.user import User
from app.packages.portal.models.waitlist import WaitlistEntry

__all__ = [
    "FileRecord",
    "Folder",
    "User",
    "WaitlistEntry",
]
