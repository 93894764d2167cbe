"""Domain models for tw_tournament — pure dataclasses."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.tw_common.enums import MULTI_MEMBER_TEAM_SIZES, TeamSize, TournamentStatus


@dataclass(frozen=True)
class RoomDetails:
    """Lobby credentials, released to registered players once play starts."""

    room_id: str = ""
    room_password: str = ""
    custom_url: str = ""
    notes: str = ""

    @property
    def published(self) -> bool:
        return bool(self.room_id)


@dataclass(frozen=True)
class RoomDetailsUpdate:
    """Admin edit of the room; None leaves a field as it is."""

    room_id: str | None = None
    room_password: str | None = None
    custom_url: str | None = None
    notes: str | None = None

    def apply(self, current: RoomDetails) -> RoomDetails:
        return RoomDetails(
            room_id=current.room_id if self.room_id is None else self.room_id.strip(),
            room_password=(
                current.room_password if self.room_password is None
                else self.room_password.strip()
            ),
            custom_url=current.custom_url if self.custom_url is None else self.custom_url.strip(),
            notes=current.notes if self.notes is None else self.notes,
        )


@dataclass(frozen=True)
class PrizeTable:
    top5: tuple[int, ...] = ()       # cents, positions 1-5
    top10: tuple[int, ...] = ()      # cents, positions 6-10
    per_kill: int = 0                # cents

    @property
    def configured(self) -> bool:
        return bool(self.top5 or self.top10 or self.per_kill)

    def to_dict(self) -> dict[str, Any]:
        return {"top5": list(self.top5), "top10": list(self.top10), "per_kill": self.per_kill}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PrizeTable":
        return cls(
            top5=tuple(int(p) for p in data.get("top5") or ()),
            top10=tuple(int(p) for p in data.get("top10") or ()),
            per_kill=int(data.get("per_kill") or 0),
        )


@dataclass(frozen=True)
class PrizeTableUpdate:
    top5: tuple[int, ...] | None = None
    top10: tuple[int, ...] | None = None
    per_kill: int | None = None

    def apply(self, current: PrizeTable) -> PrizeTable:
        return PrizeTable(
            top5=current.top5 if self.top5 is None else self.top5,
            top10=current.top10 if self.top10 is None else self.top10,
            per_kill=current.per_kill if self.per_kill is None else self.per_kill,
        )


@dataclass
class Tournament:
    id: str
    code: str                        # public tournament id, e.g. "FF-CS-0412"
    map: str
    mode: str                        # TournamentMode value
    team_size: str | None            # TeamSize value
    entry_fee: int                   # cents
    winning_fee: int                 # cents, advertised prize
    max_slots: int
    start_time: datetime
    status: str = TournamentStatus.UPCOMING.value
    registered_players: int = 0
    registered_user_ids: tuple[str, ...] = field(default_factory=tuple)
    room: RoomDetails = field(default_factory=RoomDetails)
    prizes: PrizeTable = field(default_factory=PrizeTable)
    version: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def available_slots(self) -> int:
        return max(self.max_slots - self.registered_players, 0)

    @property
    def requires_team_selection(self) -> bool:
        return self.team_size is not None and TeamSize(self.team_size) in MULTI_MEMBER_TEAM_SIZES

    def has_registered(self, user_id: str) -> bool:
        return user_id in self.registered_user_ids


@dataclass
class TournamentDefinition:
    """Admin input for a new tournament, before it has an id."""

    code: str
    map: str
    mode: str
    team_size: str | None
    entry_fee: int
    winning_fee: int
    max_slots: int
    start_time: datetime
