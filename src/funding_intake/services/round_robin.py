"""
Sales-rep rotation: name matching and the round-robin cursor
"""
import asyncio
from typing import Callable, List, Optional

from sqlalchemy.orm import Session
from rich.markup import escape

from funding_intake.core.config import SalesRepConfig, settings
from funding_intake.database.session import get_session
from funding_intake.external.crm.client import ZohoCRMClient
from funding_intake.repositories.cursor_repository import CursorRepository
from funding_intake.utils.helpers import safe_get
from funding_intake.utils.logging import get_logger

logger = get_logger(__name__)


def find_rep_by_name(name: Optional[str], roster: List[SalesRepConfig]) -> Optional[SalesRepConfig]:
    """
    Match a free-text specialist name against the roster.

    Exact case-insensitive match wins; otherwise the first rep whose name
    contains, or is contained in, the search text.
    """
    if not name or not name.strip():
        return None
    search = name.strip().lower()

    for rep in roster:
        if rep.name.lower() == search:
            return rep
    for rep in roster:
        rep_name = rep.name.lower()
        if search in rep_name or rep_name in search:
            return rep
    return None


def next_round_robin_index(last_owner_id: Optional[str], roster: List[SalesRepConfig]) -> int:
    """Position after the last owner; 0 when there is none or it left the roster"""
    if not last_owner_id:
        return 0
    for index, rep in enumerate(roster):
        if rep.id == last_owner_id:
            return (index + 1) % len(roster)
    return 0


class CRMCursorSource:
    """Derives the cursor from the owner of the newest website lead in the CRM"""

    def __init__(self, client: ZohoCRMClient):
        self.client = client

    async def last_owner_id(self, access_token: str) -> Optional[str]:
        lead = await self.client.search_latest_lead(access_token)
        if lead is None:
            return None
        return safe_get(lead, "Owner", "id")

    async def next_rep(self, access_token: str, roster: List[SalesRepConfig]) -> SalesRepConfig:
        # The created lead itself becomes the next cursor
        last_owner_id = await self.last_owner_id(access_token)
        return roster[next_round_robin_index(last_owner_id, roster)]


class DatabaseCursorStore:
    """
    Keeps the last assigned rep in the round_robin_cursors table.

    Choosing a rep and moving the cursor happen in one transaction with the
    cursor row locked, so concurrent submissions get consecutive reps.
    """

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None, roster_key: Optional[str] = None):
        self.session_factory = session_factory or get_session
        self.roster_key = roster_key or settings.round_robin.roster_key

    def _claim(self, roster: List[SalesRepConfig]) -> SalesRepConfig:
        db = self.session_factory()
        try:
            repository = CursorRepository(db)
            last_owner_id = repository.last_owner_id(self.roster_key, lock=True)
            rep = roster[next_round_robin_index(last_owner_id, roster)]
            repository.record_owner(self.roster_key, rep.id)
            return rep
        finally:
            db.close()

    async def next_rep(self, access_token: str, roster: List[SalesRepConfig]) -> SalesRepConfig:
        rep = await asyncio.to_thread(self._claim, roster)
        logger.debug(f"[dim]Round-robin cursor for {self.roster_key} moved to {rep.id}[/dim]")
        return rep


class RoundRobinAssigner:
    """Chooses the owner for a new lead"""

    def __init__(self, cursor, roster: Optional[List[SalesRepConfig]] = None):
        self.cursor = cursor
        self.roster = roster if roster is not None else settings.round_robin.roster

    async def next_rep(self, access_token: str) -> Optional[SalesRepConfig]:
        if not self.roster:
            return None
        try:
            return await self.cursor.next_rep(access_token, self.roster)
        except Exception as e:
            logger.error(f"[red]❌ Error getting round-robin rep:[/red] {escape(str(e))}")
            return self.roster[0]

    async def assign(self, access_token: str, specialist_name: Optional[str]) -> Optional[SalesRepConfig]:
        matched = find_rep_by_name(specialist_name, self.roster)
        if matched:
            logger.info(
                f"[cyan]Funding specialist[/cyan] \"{escape(specialist_name)}\" matched to rep: "
                f"{matched.name} ({matched.id})"
            )
            return matched

        rep = await self.next_rep(access_token)
        if rep:
            logger.info(
                f"[cyan]No rep match for[/cyan] \"{escape(specialist_name or 'N/A')}\". "
                f"Using round-robin: {rep.name} ({rep.id})"
            )
        return rep
