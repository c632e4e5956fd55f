"""
Data access for the persisted round-robin cursor
"""
from typing import Optional

from sqlalchemy.orm import Session

from funding_intake.database.models import RoundRobinCursor


class CursorRepository:
    """One row per roster key holding the owner of the latest assigned lead"""

    def __init__(self, db: Session):
        self.db = db

    def _find(self, roster_key: str, lock: bool = False) -> Optional[RoundRobinCursor]:
        query = self.db.query(RoundRobinCursor).filter_by(roster_key=roster_key)
        if lock:
            query = query.with_for_update()
        return query.first()

    def last_owner_id(self, roster_key: str, lock: bool = False) -> Optional[str]:
        """
        Owner recorded for the roster.

        With ``lock`` the row stays locked (SELECT ... FOR UPDATE) until the
        session commits, so a read followed by record_owner is one atomic step.
        """
        cursor = self._find(roster_key, lock=lock)
        return cursor.last_owner_id if cursor else None

    def record_owner(self, roster_key: str, owner_id: str) -> RoundRobinCursor:
        """Move the cursor, creating the row the first time a roster is used"""
        cursor = self._find(roster_key)
        if cursor is None:
            cursor = RoundRobinCursor(roster_key=roster_key, last_owner_id=owner_id)
            self.db.add(cursor)
        else:
            cursor.last_owner_id = owner_id
        self.db.commit()
        self.db.refresh(cursor)
        return cursor
