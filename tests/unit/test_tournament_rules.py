"""Tests for tournament definition rules and status transitions."""

from datetime import UTC, datetime

import pytest

from src.tw_common.errors import NotRegisteredError, RoomNotAvailableError
from src.tw_tournament.domain.models import (
    PrizeTable,
    PrizeTableUpdate,
    RoomDetails,
    RoomDetailsUpdate,
    Tournament,
    TournamentDefinition,
)
from src.tw_tournament.domain.rules import (
    can_transition,
    check_room_access,
    validate_definition,
    validate_prize_update,
    validate_room_update,
)


def _definition(**overrides) -> TournamentDefinition:
    fields = {
        "code": "FF-CS-0412",
        "map": "Bermuda",
        "mode": "clash_squad",
        "team_size": "4v4",
        "entry_fee": 4000,
        "winning_fee": 20000,
        "max_slots": 8,
        "start_time": datetime(2026, 11, 1, 18, 0, tzinfo=UTC),
    }
    fields.update(overrides)
    return TournamentDefinition(**fields)


class TestValidateDefinition:
    def test_valid(self) -> None:
        assert validate_definition(_definition()) == []

    def test_battle_royal_needs_48_slots(self) -> None:
        problems = validate_definition(_definition(mode="battle_royal", team_size=None))
        assert problems == ["battle royal tournaments must have exactly 48 slots"]
        assert validate_definition(
            _definition(mode="battle_royal", team_size=None, max_slots=48)
        ) == []

    @pytest.mark.parametrize("mode", ["clash_squad", "lone_wolf"])
    def test_team_size_required(self, mode) -> None:
        problems = validate_definition(_definition(mode=mode, team_size=None))
        assert problems == [f"team size is required for {mode} tournaments"]

    def test_collects_every_problem(self) -> None:
        problems = validate_definition(
            _definition(code=" ", mode="deathmatch", team_size="3v3", max_slots=0, entry_fee=-1)
        )
        assert len(problems) == 5

    def test_free_tournament_allowed(self) -> None:
        assert validate_definition(_definition(entry_fee=0)) == []


class TestCanTransition:
    def test_forward(self) -> None:
        assert can_transition("upcoming", "active")
        assert can_transition("active", "completed")
        assert can_transition("upcoming", "completed")

    def test_backward_or_same(self) -> None:
        assert not can_transition("completed", "active")
        assert not can_transition("active", "upcoming")
        assert not can_transition("active", "active")


class TestRoomUpdate:
    def test_blank_credentials_rejected(self) -> None:
        problems = validate_room_update(RoomDetailsUpdate(room_id="  ", room_password=""))
        assert problems == [
            "room id must be a non-empty string",
            "room password must be a non-empty string",
        ]

    def test_custom_url_must_be_http(self) -> None:
        assert validate_room_update(RoomDetailsUpdate(custom_url="ftp://lobby")) == [
            "custom URL must be a valid http(s) URL"
        ]
        assert validate_room_update(RoomDetailsUpdate(custom_url="https://ff.gg/r/1")) == []
        # Clearing the URL is allowed
        assert validate_room_update(RoomDetailsUpdate(custom_url="")) == []

    def test_apply_keeps_omitted_fields(self) -> None:
        current = RoomDetails(room_id="1234", room_password="pw", notes="be early")
        room = RoomDetailsUpdate(room_password=" secret ").apply(current)
        assert room == RoomDetails(room_id="1234", room_password="secret", notes="be early")


class TestPrizeUpdate:
    def test_valid(self) -> None:
        update = PrizeTableUpdate(top5=(50000, 30000, 10000), per_kill=500)
        assert validate_prize_update(update) == []

    def test_negative_and_oversized_tiers(self) -> None:
        update = PrizeTableUpdate(top5=(1, 1, 1, 1, 1, 1), top10=(100, -5), per_kill=-1)
        assert validate_prize_update(update) == [
            "top5 holds at most 5 prizes",
            "top10[1] must be >= 0",
            "per kill prize must be >= 0",
        ]

    def test_apply_merges_tiers(self) -> None:
        current = PrizeTable(top5=(5000,), top10=(100,), per_kill=50)
        prizes = PrizeTableUpdate(top10=()).apply(current)
        assert prizes == PrizeTable(top5=(5000,), top10=(), per_kill=50)
        assert prizes.configured


def _tournament(status: str, members: tuple[str, ...] = ("u-1",)) -> Tournament:
    return Tournament(
        id="t-1",
        code="FF-CS-0412",
        map="Bermuda",
        mode="clash_squad",
        team_size="1vs1",
        entry_fee=4000,
        winning_fee=10000,
        max_slots=2,
        start_time=datetime(2026, 11, 1, 18, 0, tzinfo=UTC),
        status=status,
        registered_players=len(members),
        registered_user_ids=members,
    )


class TestRoomAccess:
    def test_outsider_rejected_before_status(self) -> None:
        with pytest.raises(NotRegisteredError) as exc_info:
            check_room_access(_tournament("upcoming"), "u-2")
        assert exc_info.value.http_status == 403

    def test_upcoming_not_available(self) -> None:
        with pytest.raises(RoomNotAvailableError) as exc_info:
            check_room_access(_tournament("upcoming"), "u-1")
        assert exc_info.value.http_status == 400

    @pytest.mark.parametrize("status", ["active", "completed"])
    def test_registered_player_once_started(self, status) -> None:
        check_room_access(_tournament(status), "u-1")
