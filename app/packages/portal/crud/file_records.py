"""文件记录 CRUD。"""

from typing import Optional

from sqlalchemy.orm import Session

from app.packages.portal.crud.base import CRUDBase
from app.packages.portal.models.file_record import FileRecord


class CRUDFileRecord(CRUDBase[FileRecord]):
    def _by_folder(self, db: Session, folder_id: Optional[int]):
        query = self.query(db)
        if folder_id is None:
            return query.filter(FileRecord.folder_id.is_(None))
        return query.filter(FileRecord.folder_id == folder_id)

    def list_by_folder(self, db: Session, folder_id: Optional[int]) -> list[FileRecord]:
        return (
            self._by_folder(db, folder_id)
            .order_by(FileRecord.updated_at.desc(), FileRecord.id.desc())
            .all()
        )

    def delete_by_folder(self, db: Session, folder_id: int) -> list[FileRecord]:
        """标记删除直接位于指定文件夹下的全部文件记录并返回这些行；由调用方与文件夹一起提交。"""
        rows = self._by_folder(db, folder_id).all()
        for row in rows:
            db.delete(row)
        return rows


file_record_crud = CRUDFileRecord(FileRecord)
