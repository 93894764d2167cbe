"""RegistrationRepository — raw SQL over the registrations table.

Both uniqueness rules are UNIQUE constraints; a violation surfaces as an
IntegrityError naming the constraint, which is mapped to the domain error.
The failed INSERT aborts the transaction, and the caller rolls it back.
"""

import json
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_common.errors import AlreadyRegisteredError, FreeFireIdTakenError
from src.tw_registration.domain.models import Registration, TournamentSnapshot, UserSnapshot

UQ_USER_TOURNAMENT = "uq_registrations_user_tournament"
UQ_TOURNAMENT_FREE_FIRE_ID = "uq_registrations_tournament_ffid"

_REGISTRATION_COLUMNS = """
    id, user_id, tournament_id, free_fire_id, team_selection, status,
    payment_method, amount_paid, from_deposit, from_winning, ledger_entry_id,
    user_snapshot, tournament_snapshot, created_at
"""

_INSERT_REGISTRATION_SQL = text(f"""
    INSERT INTO registrations
        (id, user_id, tournament_id, free_fire_id, team_selection, status,
         payment_method, amount_paid, from_deposit, from_winning, ledger_entry_id,
         user_snapshot, tournament_snapshot)
    VALUES
        (:id, :user_id, :tournament_id, :free_fire_id, :team_selection, :status,
         :payment_method, :amount_paid, :from_deposit, :from_winning, :ledger_entry_id,
         CAST(:user_snapshot AS JSONB), CAST(:tournament_snapshot AS JSONB))
    RETURNING {_REGISTRATION_COLUMNS}
""")

_FREE_FIRE_ID_TAKEN_SQL = text("""
    SELECT 1 FROM registrations
    WHERE tournament_id = :tournament_id AND free_fire_id = :free_fire_id
    LIMIT 1
""")

_GET_BY_USER_TOURNAMENT_SQL = text(f"""
    SELECT {_REGISTRATION_COLUMNS}
    FROM registrations
    WHERE user_id = :user_id AND tournament_id = :tournament_id
""")


def _load_json(value: Any) -> dict[str, Any]:
    # asyncpg hands JSONB back as text unless a codec is registered
    if value is None:
        return {}
    if isinstance(value, str):
        return json.loads(value)
    return dict(value)


def _row_to_registration(row: object) -> Registration:
    user = _load_json(row.user_snapshot)  # type: ignore[attr-defined]
    tournament = _load_json(row.tournament_snapshot)  # type: ignore[attr-defined]
    return Registration(
        id=str(row.id),  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        tournament_id=str(row.tournament_id),  # type: ignore[attr-defined]
        free_fire_id=row.free_fire_id,  # type: ignore[attr-defined]
        team_selection=row.team_selection,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        payment_method=row.payment_method,  # type: ignore[attr-defined]
        amount_paid=row.amount_paid,  # type: ignore[attr-defined]
        from_deposit=row.from_deposit,  # type: ignore[attr-defined]
        from_winning=row.from_winning,  # type: ignore[attr-defined]
        ledger_entry_id=row.ledger_entry_id,  # type: ignore[attr-defined]
        user_snapshot=UserSnapshot(**user),
        tournament_snapshot=TournamentSnapshot(
            code=tournament["code"],
            mode=tournament["mode"],
            team_size=tournament.get("team_size"),
            map=tournament["map"],
            start_time=datetime.fromisoformat(tournament["start_time"]),
        ),
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class RegistrationRepository:
    async def insert_registration(
        self, db: AsyncSession, registration: Registration
    ) -> Registration:
        params = {
            "id": registration.id,
            "user_id": registration.user_id,
            "tournament_id": registration.tournament_id,
            "free_fire_id": registration.free_fire_id,
            "team_selection": registration.team_selection,
            "status": registration.status,
            "payment_method": registration.payment_method,
            "amount_paid": registration.amount_paid,
            "from_deposit": registration.from_deposit,
            "from_winning": registration.from_winning,
            "ledger_entry_id": registration.ledger_entry_id,
            "user_snapshot": json.dumps(registration.user_snapshot.to_dict()),
            "tournament_snapshot": json.dumps(registration.tournament_snapshot.to_dict()),
        }
        try:
            result = await db.execute(_INSERT_REGISTRATION_SQL, params)
        except IntegrityError as exc:
            message = str(exc.orig)
            if UQ_USER_TOURNAMENT in message:
                raise AlreadyRegisteredError(registration.tournament_id) from exc
            if UQ_TOURNAMENT_FREE_FIRE_ID in message:
                raise FreeFireIdTakenError(registration.free_fire_id) from exc
            raise
        return _row_to_registration(result.fetchone())

    async def free_fire_id_taken(
        self, db: AsyncSession, tournament_id: str, free_fire_id: str
    ) -> bool:
        result = await db.execute(
            _FREE_FIRE_ID_TAKEN_SQL,
            {"tournament_id": tournament_id, "free_fire_id": free_fire_id},
        )
        return result.fetchone() is not None

    async def get_by_user_tournament(
        self, db: AsyncSession, user_id: str, tournament_id: str
    ) -> Registration | None:
        result = await db.execute(
            _GET_BY_USER_TOURNAMENT_SQL, {"user_id": user_id, "tournament_id": tournament_id}
        )
        row = result.fetchone()
        return _row_to_registration(row) if row else None
