"""Unit tests for RegistrationRepository using MagicMock AsyncSession."""

import json
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from src.tw_common.errors import AlreadyRegisteredError, FreeFireIdTakenError
from src.tw_registration.domain.models import Registration, TournamentSnapshot, UserSnapshot
from src.tw_registration.infrastructure.persistence import RegistrationRepository

_START = datetime(2026, 11, 1, 18, 0, tzinfo=UTC)


def _registration() -> Registration:
    return Registration(
        id="reg-1",
        user_id="u-1",
        tournament_id="t-1",
        free_fire_id="512345678",
        team_selection="team_a",
        amount_paid=4000,
        from_deposit=3000,
        from_winning=1000,
        ledger_entry_id=7,
        user_snapshot=UserSnapshot("Asha Rao", "asha@example.com", "9000000000", 22, "Kerala"),
        tournament_snapshot=TournamentSnapshot("FF-CS-1", "clash_squad", "2v2", "Bermuda", _START),
    )


def _row(registration: Registration):
    row = MagicMock()
    for name in (
        "id", "user_id", "tournament_id", "free_fire_id", "team_selection", "status",
        "payment_method", "amount_paid", "from_deposit", "from_winning", "ledger_entry_id",
    ):
        setattr(row, name, getattr(registration, name))
    row.user_snapshot = json.dumps(registration.user_snapshot.to_dict())
    row.tournament_snapshot = registration.tournament_snapshot.to_dict()
    row.created_at = datetime.now(UTC)
    return row


def _result(row):
    result = MagicMock()
    result.fetchone.return_value = row
    return result


def _unique_violation(constraint: str) -> IntegrityError:
    return IntegrityError(
        "INSERT INTO registrations ...",
        {},
        Exception(f'duplicate key value violates unique constraint "{constraint}"'),
    )


@pytest.fixture
def db():
    return MagicMock()


class TestInsertRegistration:
    async def test_snapshots_stored_as_json(self, db) -> None:
        registration = _registration()
        db.execute = AsyncMock(return_value=_result(_row(registration)))

        stored = await RegistrationRepository().insert_registration(db, registration)

        params = db.execute.call_args[0][1]
        assert json.loads(params["user_snapshot"])["email"] == "asha@example.com"
        assert json.loads(params["tournament_snapshot"])["start_time"] == _START.isoformat()
        assert stored.user_snapshot == registration.user_snapshot
        assert stored.tournament_snapshot == registration.tournament_snapshot

    async def test_user_tournament_violation(self, db) -> None:
        db.execute = AsyncMock(side_effect=_unique_violation("uq_registrations_user_tournament"))
        with pytest.raises(AlreadyRegisteredError):
            await RegistrationRepository().insert_registration(db, _registration())

    async def test_free_fire_id_violation(self, db) -> None:
        db.execute = AsyncMock(side_effect=_unique_violation("uq_registrations_tournament_ffid"))
        with pytest.raises(FreeFireIdTakenError):
            await RegistrationRepository().insert_registration(db, _registration())

    async def test_other_integrity_errors_propagate(self, db) -> None:
        db.execute = AsyncMock(side_effect=_unique_violation("registrations_user_id_fkey"))
        with pytest.raises(IntegrityError):
            await RegistrationRepository().insert_registration(db, _registration())


class TestReads:
    async def test_free_fire_id_taken(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(MagicMock()))
        assert await RegistrationRepository().free_fire_id_taken(db, "t-1", "4242") is True

    async def test_free_fire_id_free(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(None))
        assert await RegistrationRepository().free_fire_id_taken(db, "t-1", "4242") is False

    async def test_get_missing(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(None))
        assert await RegistrationRepository().get_by_user_tournament(db, "u-1", "t-1") is None
