"""文件夹 CRUD。"""

from typing import Optional

from sqlalchemy.orm import Session

from app.packages.portal.crud.base import CRUDBase
from app.packages.portal.models.folder import Folder


class CRUDFolder(CRUDBase[Folder]):
    def list_by_parent(self, db: Session, parent_id: Optional[int]) -> list[Folder]:
        """按父文件夹精确匹配；``parent_id`` 为空时返回根节点。"""
        query = self.query(db)
        if parent_id is None:
            query = query.filter(Folder.parent_id.is_(None))
        else:
            query = query.filter(Folder.parent_id == parent_id)
        return query.order_by(Folder.created_at.desc(), Folder.id.desc()).all()


folder_crud = CRUDFolder(Folder)
