"""Unit tests for TournamentRepository using MagicMock AsyncSession."""

import json
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.tw_common.errors import TournamentCodeExistsError
from src.tw_tournament.domain.models import PrizeTable, RoomDetails, TournamentDefinition
from src.tw_tournament.infrastructure.persistence import _RESERVE_SLOT_SQL, TournamentRepository


def _tournament_row(**kwargs):
    row = MagicMock()
    row.id = kwargs.get("id", "t-1")
    row.code = "FF-CS-1"
    row.map = "Bermuda"
    row.mode = "clash_squad"
    row.team_size = "2v2"
    row.entry_fee = 4000
    row.winning_fee = 10000
    row.max_slots = kwargs.get("max_slots", 4)
    row.start_time = datetime(2026, 11, 1, tzinfo=UTC)
    row.status = kwargs.get("status", "upcoming")
    row.registered_players = kwargs.get("registered_players", 1)
    row.registered_user_ids = kwargs.get("registered_user_ids", ["u-1"])
    row.room_id = kwargs.get("room_id", "")
    row.room_password = kwargs.get("room_password", "")
    row.custom_url = ""
    row.room_notes = ""
    row.prizes = kwargs.get("prizes", {"top5": [], "top10": [], "per_kill": 0})
    row.version = 3
    row.created_at = datetime.now(UTC)
    row.updated_at = datetime.now(UTC)
    return row


def _result(row):
    result = MagicMock()
    result.fetchone.return_value = row
    return result


@pytest.fixture
def db():
    return MagicMock()


class TestReserveSlot:
    async def test_returns_updated_tournament(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(_tournament_row()))
        tournament = await TournamentRepository().reserve_slot(db, "t-1", "u-1")
        assert tournament is not None
        assert tournament.registered_user_ids == ("u-1",)
        assert db.execute.call_args[0][1] == {"tournament_id": "t-1", "user_id": "u-1"}

    async def test_guard_miss_returns_none(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(None))
        assert await TournamentRepository().reserve_slot(db, "t-1", "u-9") is None

    def test_statement_checks_and_increments_together(self) -> None:
        sql = str(_RESERVE_SLOT_SQL)
        assert "registered_players < max_slots" in sql
        assert "status = 'upcoming'" in sql
        assert "array_append" in sql


class TestGetTournament:
    async def test_null_array_maps_to_empty_tuple(self, db) -> None:
        db.execute = AsyncMock(
            return_value=_result(_tournament_row(registered_players=0, registered_user_ids=None))
        )
        tournament = await TournamentRepository().get_tournament(db, "t-1")
        assert tournament.registered_user_ids == ()
        assert tournament.available_slots == 4


class TestCreateTournament:
    async def test_code_conflict(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(None))
        definition = TournamentDefinition(
            code="FF-CS-1",
            map="Bermuda",
            mode="clash_squad",
            team_size="2v2",
            entry_fee=4000,
            winning_fee=10000,
            max_slots=4,
            start_time=datetime(2026, 11, 1, tzinfo=UTC),
        )
        with pytest.raises(TournamentCodeExistsError):
            await TournamentRepository().create_tournament(db, definition)


async def test_update_status_binds_expected_status(db) -> None:
    db.execute = AsyncMock(return_value=_result(_tournament_row(status="active")))
    tournament = await TournamentRepository().update_status(db, "t-1", "upcoming", "active")
    assert tournament.status == "active"
    assert db.execute.call_args[0][1] == {
        "tournament_id": "t-1",
        "expected_status": "upcoming",
        "new_status": "active",
    }


class TestRoomAndPrizes:
    async def test_prizes_decoded_from_jsonb_text(self, db) -> None:
        row = _tournament_row(prizes='{"top5": [50000, 20000], "top10": [], "per_kill": 500}')
        db.execute = AsyncMock(return_value=_result(row))
        tournament = await TournamentRepository().get_tournament(db, "t-1")
        assert tournament.prizes == PrizeTable(top5=(50000, 20000), per_kill=500)

    async def test_update_prizes_binds_json(self, db) -> None:
        row = _tournament_row(prizes={"top5": [], "top10": [700], "per_kill": 0})
        db.execute = AsyncMock(return_value=_result(row))
        tournament = await TournamentRepository().update_prizes(
            db, "t-1", PrizeTable(top10=(700,))
        )
        params = db.execute.call_args[0][1]
        assert json.loads(params["prizes"]) == {"top5": [], "top10": [700], "per_kill": 0}
        assert tournament.prizes.top10 == (700,)

    async def test_update_room_details(self, db) -> None:
        row = _tournament_row(room_id="88213", room_password="ffpw")
        db.execute = AsyncMock(return_value=_result(row))
        room = RoomDetails(room_id="88213", room_password="ffpw", notes="be early")
        tournament = await TournamentRepository().update_room_details(db, "t-1", room)
        params = db.execute.call_args[0][1]
        assert params["room_notes"] == "be early"
        assert tournament.room.room_id == "88213"

    async def test_missing_tournament_returns_none(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(None))
        assert await TournamentRepository().update_prizes(db, "nope", PrizeTable()) is None
