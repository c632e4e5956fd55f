"""
Persisted lead-rotation cursor
"""
from sqlalchemy import Column, String

from funding_intake.database.models.base import BaseModel


class RoundRobinCursor(BaseModel):
    """
    Last representative assigned for a roster.
    Maps to the 'round_robin_cursors' table.
    """
    __tablename__ = "round_robin_cursors"

    roster_key = Column(String(100), unique=True, nullable=False, index=True)
    last_owner_id = Column(String(50), nullable=True)

    def __repr__(self):
        return f"<RoundRobinCursor(roster_key={self.roster_key}, last_owner_id={self.last_owner_id})>"
