"""Pydantic schemas for tw_tournament API."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.tw_common.cents import cents_to_display
from src.tw_common.enums import TeamSize, TournamentMode, TournamentStatus
from src.tw_tournament.domain.models import (
    PrizeTable,
    PrizeTableUpdate,
    RoomDetailsUpdate,
    Tournament,
    TournamentDefinition,
)


class CreateTournamentRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=64, description="Public tournament id")
    map: str = Field(..., min_length=1, max_length=64)
    mode: TournamentMode
    team_size: TeamSize | None = None
    entry_fee_cents: int = Field(..., ge=0)
    winning_fee_cents: int = Field(..., ge=0)
    max_slots: int = Field(..., ge=1)
    start_time: datetime

    def to_definition(self) -> TournamentDefinition:
        return TournamentDefinition(
            code=self.code.strip(),
            map=self.map.strip(),
            mode=self.mode.value,
            team_size=self.team_size.value if self.team_size else None,
            entry_fee=self.entry_fee_cents,
            winning_fee=self.winning_fee_cents,
            max_slots=self.max_slots,
            start_time=self.start_time,
        )


class UpdateStatusRequest(BaseModel):
    status: TournamentStatus


class PrizeTableOut(BaseModel):
    top5_cents: list[int]
    top10_cents: list[int]
    per_kill_cents: int
    configured: bool

    @classmethod
    def from_domain(cls, prizes: PrizeTable) -> "PrizeTableOut":
        return cls(
            top5_cents=list(prizes.top5),
            top10_cents=list(prizes.top10),
            per_kill_cents=prizes.per_kill,
            configured=prizes.configured,
        )


class TournamentResponse(BaseModel):
    id: str
    code: str
    map: str
    mode: str
    team_size: str | None
    entry_fee_cents: int
    entry_fee_display: str
    winning_fee_cents: int
    max_slots: int
    registered_players: int
    available_slots: int
    start_time: datetime
    status: str
    room_published: bool
    prizes: PrizeTableOut

    @classmethod
    def from_domain(cls, tournament: Tournament) -> "TournamentResponse":
        return cls(
            id=tournament.id,
            code=tournament.code,
            map=tournament.map,
            mode=tournament.mode,
            team_size=tournament.team_size,
            entry_fee_cents=tournament.entry_fee,
            entry_fee_display=cents_to_display(tournament.entry_fee),
            winning_fee_cents=tournament.winning_fee,
            max_slots=tournament.max_slots,
            registered_players=tournament.registered_players,
            available_slots=tournament.available_slots,
            start_time=tournament.start_time,
            status=tournament.status,
            room_published=tournament.room.published,
            prizes=PrizeTableOut.from_domain(tournament.prizes),
        )


class RoomDetailsRequest(BaseModel):
    """Omitted fields keep their stored value."""

    room_id: str | None = Field(None, max_length=64)
    room_password: str | None = Field(None, max_length=64)
    custom_url: str | None = Field(None, max_length=512)
    notes: str | None = Field(None, max_length=2000)

    def to_update(self) -> RoomDetailsUpdate:
        return RoomDetailsUpdate(
            room_id=self.room_id,
            room_password=self.room_password,
            custom_url=self.custom_url,
            notes=self.notes,
        )


class PrizeTableRequest(BaseModel):
    top5_cents: list[int] | None = None
    top10_cents: list[int] | None = None
    per_kill_cents: int | None = None

    def to_update(self) -> PrizeTableUpdate:
        return PrizeTableUpdate(
            top5=tuple(self.top5_cents) if self.top5_cents is not None else None,
            top10=tuple(self.top10_cents) if self.top10_cents is not None else None,
            per_kill=self.per_kill_cents,
        )


class RoomResponse(BaseModel):
    tournament_id: str
    code: str
    status: str
    start_time: datetime
    room_id: str
    room_password: str
    custom_url: str
    notes: str
    prizes: PrizeTableOut

    @classmethod
    def from_domain(cls, tournament: Tournament) -> "RoomResponse":
        return cls(
            tournament_id=tournament.id,
            code=tournament.code,
            status=tournament.status,
            start_time=tournament.start_time,
            room_id=tournament.room.room_id,
            room_password=tournament.room.room_password,
            custom_url=tournament.room.custom_url,
            notes=tournament.room.notes,
            prizes=PrizeTableOut.from_domain(tournament.prizes),
        )
