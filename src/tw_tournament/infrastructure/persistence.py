"""TournamentRepository — concrete implementation of TournamentRepositoryProtocol.

Occupancy lives on the tournament row: `registered_players` and the
`registered_user_ids` array move together, and the table CHECK keeps
registered_players = cardinality(registered_user_ids) <= max_slots.
"""

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_common.errors import TournamentCodeExistsError
from src.tw_tournament.domain.models import (
    PrizeTable,
    RoomDetails,
    Tournament,
    TournamentDefinition,
)

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_TOURNAMENT_COLUMNS = """
    id, code, map, mode, team_size, entry_fee, winning_fee, max_slots,
    start_time, status, registered_players, registered_user_ids,
    room_id, room_password, custom_url, room_notes, prizes, version,
    created_at, updated_at
"""

_GET_TOURNAMENT_SQL = text(f"""
    SELECT {_TOURNAMENT_COLUMNS}
    FROM tournaments
    WHERE id = :tournament_id
""")

# Check and increment in one statement: the row lock serialises concurrent
# reservations and each re-evaluates the WHERE clause against the winner's
# committed row, so max_slots can never be overshot.
_RESERVE_SLOT_SQL = text(f"""
    UPDATE tournaments
    SET registered_players  = registered_players + 1,
        registered_user_ids = array_append(registered_user_ids, CAST(:user_id AS TEXT)),
        version = version + 1,
        updated_at = NOW()
    WHERE id = :tournament_id
      AND status = 'upcoming'
      AND registered_players < max_slots
      AND NOT (CAST(:user_id AS TEXT) = ANY(registered_user_ids))
    RETURNING {_TOURNAMENT_COLUMNS}
""")

_INSERT_TOURNAMENT_SQL = text(f"""
    INSERT INTO tournaments
        (code, map, mode, team_size, entry_fee, winning_fee, max_slots, start_time)
    VALUES
        (:code, :map, :mode, :team_size, :entry_fee, :winning_fee, :max_slots, :start_time)
    ON CONFLICT (code) DO NOTHING
    RETURNING {_TOURNAMENT_COLUMNS}
""")

_UPDATE_STATUS_SQL = text(f"""
    UPDATE tournaments
    SET status = :new_status,
        version = version + 1,
        updated_at = NOW()
    WHERE id = :tournament_id AND status = :expected_status
    RETURNING {_TOURNAMENT_COLUMNS}
""")

_UPDATE_ROOM_SQL = text(f"""
    UPDATE tournaments
    SET room_id = :room_id,
        room_password = :room_password,
        custom_url = :custom_url,
        room_notes = :room_notes,
        version = version + 1,
        updated_at = NOW()
    WHERE id = :tournament_id
    RETURNING {_TOURNAMENT_COLUMNS}
""")

_UPDATE_PRIZES_SQL = text(f"""
    UPDATE tournaments
    SET prizes = CAST(:prizes AS JSONB),
        version = version + 1,
        updated_at = NOW()
    WHERE id = :tournament_id
    RETURNING {_TOURNAMENT_COLUMNS}
""")

# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _load_prizes(value: Any) -> PrizeTable:
    # asyncpg hands JSONB back as text unless a codec is registered
    if value is None:
        return PrizeTable()
    if isinstance(value, str):
        value = json.loads(value)
    return PrizeTable.from_dict(value)


def _row_to_tournament(row: object) -> Tournament:
    return Tournament(
        id=str(row.id),  # type: ignore[attr-defined]
        code=row.code,  # type: ignore[attr-defined]
        map=row.map,  # type: ignore[attr-defined]
        mode=row.mode,  # type: ignore[attr-defined]
        team_size=row.team_size,  # type: ignore[attr-defined]
        entry_fee=row.entry_fee,  # type: ignore[attr-defined]
        winning_fee=row.winning_fee,  # type: ignore[attr-defined]
        max_slots=row.max_slots,  # type: ignore[attr-defined]
        start_time=row.start_time,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        registered_players=row.registered_players,  # type: ignore[attr-defined]
        registered_user_ids=tuple(row.registered_user_ids or ()),  # type: ignore[attr-defined]
        room=RoomDetails(
            room_id=row.room_id,  # type: ignore[attr-defined]
            room_password=row.room_password,  # type: ignore[attr-defined]
            custom_url=row.custom_url,  # type: ignore[attr-defined]
            notes=row.room_notes,  # type: ignore[attr-defined]
        ),
        prizes=_load_prizes(row.prizes),  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class TournamentRepository:
    async def get_tournament(
        self, db: AsyncSession, tournament_id: str
    ) -> Tournament | None:
        result = await db.execute(_GET_TOURNAMENT_SQL, {"tournament_id": tournament_id})
        row = result.fetchone()
        return _row_to_tournament(row) if row else None

    async def reserve_slot(
        self, db: AsyncSession, tournament_id: str, user_id: str
    ) -> Tournament | None:
        result = await db.execute(
            _RESERVE_SLOT_SQL, {"tournament_id": tournament_id, "user_id": user_id}
        )
        row = result.fetchone()
        return _row_to_tournament(row) if row else None

    async def create_tournament(
        self, db: AsyncSession, definition: TournamentDefinition
    ) -> Tournament:
        result = await db.execute(
            _INSERT_TOURNAMENT_SQL,
            {
                "code": definition.code,
                "map": definition.map,
                "mode": definition.mode,
                "team_size": definition.team_size,
                "entry_fee": definition.entry_fee,
                "winning_fee": definition.winning_fee,
                "max_slots": definition.max_slots,
                "start_time": definition.start_time,
            },
        )
        row = result.fetchone()
        if row is None:
            raise TournamentCodeExistsError(definition.code)
        return _row_to_tournament(row)

    async def update_status(
        self, db: AsyncSession, tournament_id: str, expected_status: str, new_status: str
    ) -> Tournament | None:
        result = await db.execute(
            _UPDATE_STATUS_SQL,
            {
                "tournament_id": tournament_id,
                "expected_status": expected_status,
                "new_status": new_status,
            },
        )
        row = result.fetchone()
        return _row_to_tournament(row) if row else None

    async def update_room_details(
        self, db: AsyncSession, tournament_id: str, room: RoomDetails
    ) -> Tournament | None:
        result = await db.execute(
            _UPDATE_ROOM_SQL,
            {
                "tournament_id": tournament_id,
                "room_id": room.room_id,
                "room_password": room.room_password,
                "custom_url": room.custom_url,
                "room_notes": room.notes,
            },
        )
        row = result.fetchone()
        return _row_to_tournament(row) if row else None

    async def update_prizes(
        self, db: AsyncSession, tournament_id: str, prizes: PrizeTable
    ) -> Tournament | None:
        result = await db.execute(
            _UPDATE_PRIZES_SQL,
            {"tournament_id": tournament_id, "prizes": json.dumps(prizes.to_dict())},
        )
        row = result.fetchone()
        return _row_to_tournament(row) if row else None
