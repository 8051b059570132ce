"""候补名单服务。"""

from typing import Optional

from app.packages.portal.core.logger import logger
from app.packages.portal.store.base import EntityStore
from app.packages.portal.store.entities import WaitlistEntry


class WaitlistService:
    def join(self, store: EntityStore, *, email: str, name: str, company: Optional[str] = None) -> WaitlistEntry:
        entry = store.create_waitlist_entry(email=email, name=name, company=company or None)
        logger.info("Waitlist entry %s created", entry.id)
        return entry

    def list_entries(self, store: EntityStore) -> list[WaitlistEntry]:
        return store.list_waitlist_entries()

    def remove(self, store: EntityStore, entry_id: int) -> None:
        store.delete_waitlist_entry(entry_id)
        logger.info("Waitlist entry %s removed", entry_id)


waitlist_service = WaitlistService()
