"""候补名单 CRUD。"""

from typing import Optional

from sqlalchemy.orm import Session

from app.packages.portal.crud.base import CRUDBase
from app.packages.portal.models.waitlist import WaitlistEntry


class CRUDWaitlist(CRUDBase[WaitlistEntry]):
    def get_by_email(self, db: Session, email: str) -> Optional[WaitlistEntry]:
        return self.query(db).filter(WaitlistEntry.email == email).first()

    def list_newest_first(self, db: Session) -> list[WaitlistEntry]:
        return (
            self.query(db)
            .order_by(WaitlistEntry.created_at.desc(), WaitlistEntry.id.desc())
            .all()
        )


waitlist_crud = CRUDWaitlist(WaitlistEntry)
