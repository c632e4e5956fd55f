"""
Tests for rep matching, rotation and the cursor sources
"""
from unittest.mock import MagicMock

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from funding_intake.core.config import CRMConfig, SalesRepConfig, settings
from funding_intake.database.models import Base
from funding_intake.external.crm.client import ZohoCRMClient
from funding_intake.repositories.cursor_repository import CursorRepository
from funding_intake.services.round_robin import (
    CRMCursorSource,
    DatabaseCursorStore,
    RoundRobinAssigner,
    find_rep_by_name,
    next_round_robin_index,
)

ROSTER = [
    SalesRepConfig(id="100", name="Ruvim Popov"),
    SalesRepConfig(id="200", name="David York"),
    SalesRepConfig(id="300", name="Tom Jones"),
]
CRM_CONFIG = CRMConfig(client_id="id", client_secret="secret", refresh_token="refresh")


class StaticCursor:
    def __init__(self, owner_id=None, error=None):
        self.owner_id = owner_id
        self.error = error

    async def next_rep(self, access_token, roster):
        if self.error:
            raise self.error
        return roster[next_round_robin_index(self.owner_id, roster)]


def test_configured_roster_order():
    roster = settings.round_robin.roster
    assert len(roster) == 29
    assert roster[0].name == "Ruvim Popov"
    assert roster[3] == SalesRepConfig(id="6522534000022419009", name="Tom Jones")


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Tom Jones", "300"),
        ("  tom jones ", "300"),
        ("York", "200"),
        ("Mr. David York Jr", "200"),
        ("Nobody", None),
        ("", None),
        (None, None),
    ],
)
def test_find_rep_by_name(name, expected):
    rep = find_rep_by_name(name, ROSTER)
    assert (rep.id if rep else None) == expected


@pytest.mark.parametrize("k", range(len(ROSTER)))
def test_next_index_follows_last_owner(k):
    assert next_round_robin_index(ROSTER[k].id, ROSTER) == (k + 1) % len(ROSTER)


@pytest.mark.parametrize("owner_id", [None, "", "999"])
def test_next_index_defaults_to_first(owner_id):
    assert next_round_robin_index(owner_id, ROSTER) == 0


async def test_assigner_prefers_named_specialist():
    cursor = StaticCursor(owner_id="100")
    rep = await RoundRobinAssigner(cursor, ROSTER).assign("token", "Tom Jones")
    assert rep.id == "300"


async def test_assigner_rotates_without_match():
    rep = await RoundRobinAssigner(StaticCursor(owner_id="300"), ROSTER).assign("token", "Unknown Person")
    assert rep.id == "100"


async def test_assigner_falls_back_to_first_on_error():
    cursor = StaticCursor(error=httpx.ConnectError("down"))
    rep = await RoundRobinAssigner(cursor, ROSTER).assign("token", "")
    assert rep.id == "100"


async def test_crm_cursor_reads_latest_owner(mock_http):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/crm/v2/Leads/search"
        assert request.url.params["criteria"] == "(Lead_Source:equals:Website - Funding Application)"
        assert request.url.params["sort_order"] == "desc"
        assert request.headers["Authorization"] == "Zoho-oauthtoken tok"
        return httpx.Response(200, json={"data": [{"id": "1", "Owner": {"id": "200", "name": "David York"}}]})

    source = CRMCursorSource(ZohoCRMClient(CRM_CONFIG, http_client=mock_http(handler)))
    assert await source.last_owner_id("tok") == "200"


async def test_crm_cursor_empty_search(mock_http):
    source = CRMCursorSource(ZohoCRMClient(CRM_CONFIG, http_client=mock_http(lambda request: httpx.Response(204))))
    assert await source.last_owner_id("tok") is None


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


async def test_crm_cursor_picks_rep_after_latest_owner(mock_http):
    def handler(request):
        return httpx.Response(200, json={"data": [{"Owner": {"id": "200"}}]})

    source = CRMCursorSource(ZohoCRMClient(CRM_CONFIG, http_client=mock_http(handler)))
    rep = await source.next_rep("tok", ROSTER)
    assert rep.id == "300"


async def test_database_cursor_claims_and_persists(session_factory):
    store = DatabaseCursorStore(session_factory, roster_key="test-roster")

    rep = await store.next_rep("unused", ROSTER)

    assert rep.id == "100"
    db = session_factory()
    try:
        assert CursorRepository(db).last_owner_id("test-roster") == "100"
        assert CursorRepository(db).last_owner_id("other-roster") is None
    finally:
        db.close()


async def test_database_cursor_drives_rotation(session_factory):
    assigner = RoundRobinAssigner(DatabaseCursorStore(session_factory, roster_key="test-roster"), ROSTER)

    picked = [(await assigner.next_rep("unused")).id for _ in range(4)]

    assert picked == ["100", "200", "300", "100"]


def test_claim_locks_the_cursor_row():
    db = MagicMock()
    query = db.query.return_value.filter_by.return_value
    query.with_for_update.return_value.first.return_value = None

    assert CursorRepository(db).last_owner_id("test-roster", lock=True) is None
    query.with_for_update.assert_called_once_with()

    CursorRepository(db).last_owner_id("test-roster")
    query.with_for_update.assert_called_once_with()


async def test_named_specialist_does_not_move_database_cursor(session_factory):
    store = DatabaseCursorStore(session_factory, roster_key="test-roster")
    assigner = RoundRobinAssigner(store, ROSTER)

    assert (await assigner.assign("unused", "Tom Jones")).id == "300"
    assert (await assigner.assign("unused", "")).id == "100"


def test_repository_records_owner(session_factory):
    db = session_factory()
    try:
        repository = CursorRepository(db)
        repository.record_owner("test-roster", "200")
        repository.record_owner("test-roster", "300")
        assert repository.last_owner_id("test-roster", lock=True) == "300"
    finally:
        db.close()
