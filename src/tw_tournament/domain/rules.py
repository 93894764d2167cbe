"""Tournament definition rules, room and prize edits, status transitions.

Cross-field rules are plain functions returning every problem found, so
the admin sees the full list instead of one storage error at a time. The
same rules exist as CHECK constraints on the tournaments table.
"""

import re

from src.tw_common.enums import (
    BATTLE_ROYAL_SLOTS,
    TEAM_SIZE_REQUIRED_MODES,
    TeamSize,
    TournamentMode,
    TournamentStatus,
)
from src.tw_common.errors import NotRegisteredError, RoomNotAvailableError
from src.tw_tournament.domain.models import (
    PrizeTableUpdate,
    RoomDetailsUpdate,
    Tournament,
    TournamentDefinition,
)

_URL_RE = re.compile(r"https?://\S+")

# top5 pays positions 1-5, top10 positions 6-10
_PRIZE_TIER_SIZE = 5

_STATUS_ORDER = {
    TournamentStatus.UPCOMING: 0,
    TournamentStatus.ACTIVE: 1,
    TournamentStatus.COMPLETED: 2,
}


def validate_definition(definition: TournamentDefinition) -> list[str]:
    problems: list[str] = []

    if not definition.code.strip():
        problems.append("tournament code is required")
    if not definition.map.strip():
        problems.append("map is required")

    mode: TournamentMode | None
    try:
        mode = TournamentMode(definition.mode)
    except ValueError:
        mode = None
        problems.append(f"unknown mode {definition.mode!r}")

    if definition.team_size is not None:
        try:
            TeamSize(definition.team_size)
        except ValueError:
            problems.append(f"unknown team size {definition.team_size!r}")
    elif mode in TEAM_SIZE_REQUIRED_MODES:
        problems.append(f"team size is required for {mode.value} tournaments")

    if definition.max_slots < 1:
        problems.append("max slots must be at least 1")
    if mode is TournamentMode.BATTLE_ROYAL and definition.max_slots != BATTLE_ROYAL_SLOTS:
        problems.append(f"battle royal tournaments must have exactly {BATTLE_ROYAL_SLOTS} slots")

    if definition.entry_fee < 0:
        problems.append("entry fee must be >= 0")
    if definition.winning_fee < 0:
        problems.append("winning fee must be >= 0")

    return problems


def can_transition(current: str, requested: str) -> bool:
    """Status only moves forward: upcoming -> active -> completed."""
    return _STATUS_ORDER[TournamentStatus(requested)] > _STATUS_ORDER[TournamentStatus(current)]


def validate_room_update(update: RoomDetailsUpdate) -> list[str]:
    problems: list[str] = []
    if update.room_id is not None and not update.room_id.strip():
        problems.append("room id must be a non-empty string")
    if update.room_password is not None and not update.room_password.strip():
        problems.append("room password must be a non-empty string")
    if update.custom_url and not _URL_RE.fullmatch(update.custom_url.strip()):
        problems.append("custom URL must be a valid http(s) URL")
    return problems


def validate_prize_update(update: PrizeTableUpdate) -> list[str]:
    problems: list[str] = []
    for name, prizes in (("top5", update.top5), ("top10", update.top10)):
        if prizes is None:
            continue
        if len(prizes) > _PRIZE_TIER_SIZE:
            problems.append(f"{name} holds at most {_PRIZE_TIER_SIZE} prizes")
        problems.extend(
            f"{name}[{i}] must be >= 0" for i, prize in enumerate(prizes) if prize < 0
        )
    if update.per_kill is not None and update.per_kill < 0:
        problems.append("per kill prize must be >= 0")
    return problems


def check_room_access(tournament: Tournament, user_id: str) -> None:
    """Room details go to registered players only, and only once play has started."""
    if not tournament.has_registered(user_id):
        raise NotRegisteredError(tournament.id)
    if tournament.status == TournamentStatus.UPCOMING.value:
        raise RoomNotAvailableError(tournament.id)
