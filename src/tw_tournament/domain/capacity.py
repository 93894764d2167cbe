"""CapacityGuard — seat limits and sign-up input rules for one tournament.

Three layers, cheapest first:
  validate_input   typed check of the sign-up form, before any mutation
  check_admission  pure read of status / occupancy / membership
  reserve          the authoritative check-and-increment, one SQL statement

check_admission is only a fast fail. Two requests can both pass it; reserve
is where exactly one of them wins the last seat.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_common.enums import TeamSelection, TournamentStatus
from src.tw_common.errors import (
    AlreadyRegisteredError,
    InvalidRegistrationInputError,
    TournamentClosedError,
    TournamentFullError,
    TournamentNotFoundError,
    TransientConflictError,
)
from src.tw_tournament.domain.models import Tournament
from src.tw_tournament.domain.repository import TournamentRepositoryProtocol

logger = logging.getLogger(__name__)

_FREE_FIRE_ID_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class RegistrationInput:
    free_fire_id: str
    terms_accepted: bool
    team_selection: TeamSelection | None = None


@dataclass(frozen=True)
class RegistrationInputCheck:
    """Outcome of validate_input: normalised values or the list of problems."""

    free_fire_id: str
    team_selection: TeamSelection | None
    problems: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.problems


class RejectionReason(str, Enum):
    TOURNAMENT_CLOSED = "TournamentClosed"
    TOURNAMENT_FULL = "TournamentFull"
    ALREADY_REGISTERED = "AlreadyRegistered"


@dataclass(frozen=True)
class AdmissionDecision:
    tournament_id: str
    reason: RejectionReason | None = None

    @property
    def admitted(self) -> bool:
        return self.reason is None

    def raise_for_rejection(self) -> None:
        if self.reason is RejectionReason.TOURNAMENT_CLOSED:
            raise TournamentClosedError(self.tournament_id)
        if self.reason is RejectionReason.TOURNAMENT_FULL:
            raise TournamentFullError(self.tournament_id)
        if self.reason is RejectionReason.ALREADY_REGISTERED:
            raise AlreadyRegisteredError(self.tournament_id)


class CapacityGuard:
    def __init__(self, repo: TournamentRepositoryProtocol) -> None:
        self._repo = repo

    @staticmethod
    def validate_input(tournament: Tournament, form: RegistrationInput) -> RegistrationInputCheck:
        problems: list[str] = []

        free_fire_id = (form.free_fire_id or "").strip()
        if not free_fire_id:
            problems.append("Free Fire ID is required")
        elif not _FREE_FIRE_ID_RE.fullmatch(free_fire_id) or not free_fire_id.lstrip("0"):
            problems.append("Free Fire ID must be a positive number")

        if form.terms_accepted is not True:
            problems.append("You must accept the terms and conditions")

        team: TeamSelection | None = None
        if tournament.requires_team_selection:
            if form.team_selection is None:
                problems.append(
                    f"Team selection is required for {tournament.team_size} tournaments"
                )
            else:
                try:
                    team = TeamSelection(form.team_selection)
                except ValueError:
                    problems.append(f"Unknown team selection {form.team_selection!r}")

        return RegistrationInputCheck(
            free_fire_id=free_fire_id, team_selection=team, problems=tuple(problems)
        )

    @classmethod
    def require_valid_input(
        cls, tournament: Tournament, form: RegistrationInput
    ) -> RegistrationInputCheck:
        check = cls.validate_input(tournament, form)
        if not check.ok:
            raise InvalidRegistrationInputError(list(check.problems))
        return check

    @staticmethod
    def check_admission(tournament: Tournament, user_id: str) -> AdmissionDecision:
        if tournament.status != TournamentStatus.UPCOMING.value:
            return AdmissionDecision(tournament.id, RejectionReason.TOURNAMENT_CLOSED)
        if tournament.registered_players >= tournament.max_slots:
            return AdmissionDecision(tournament.id, RejectionReason.TOURNAMENT_FULL)
        if tournament.has_registered(user_id):
            return AdmissionDecision(tournament.id, RejectionReason.ALREADY_REGISTERED)
        return AdmissionDecision(tournament.id)

    async def reserve(self, db: AsyncSession, tournament: Tournament, user_id: str) -> Tournament:
        """Take one seat for `user_id` or raise the reason it is refused."""
        reserved = await self._repo.reserve_slot(db, tournament.id, user_id)
        if reserved is not None:
            return reserved

        # The guarded UPDATE matched nothing: find out which guard failed.
        current = await self._repo.get_tournament(db, tournament.id)
        if current is None:
            raise TournamentNotFoundError(tournament.id)
        decision = self.check_admission(current, user_id)
        logger.info(
            "Seat refused: tournament=%s user=%s reason=%s occupancy=%d/%d",
            tournament.id, user_id, decision.reason, current.registered_players, current.max_slots,
        )
        decision.raise_for_rejection()
        raise TransientConflictError(f"seat reservation for tournament {tournament.id}")
