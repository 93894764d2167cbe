"""In-memory fakes for the repository Protocols.

Each fake mutates shared dicts immediately and registers an undo callback on
the session it was called with; FakeSession.rollback replays them in reverse,
commit forgets them. That is enough to observe "nothing survives a failed
attempt" without a database. Every call yields to the event loop first so
asyncio.gather interleaves concurrent registrations between steps, while the
seat reservation itself stays a single uninterrupted check-and-act.
"""

import asyncio
import itertools
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from src.tw_award.application.coordinator import AwardCoordinator
from src.tw_common.enums import TournamentStatus
from src.tw_common.errors import (
    AlreadyRegisteredError,
    DuplicateReferenceError,
    FreeFireIdTakenError,
    TournamentCodeExistsError,
)
from src.tw_registration.application.coordinator import RegistrationCoordinator
from src.tw_registration.domain.models import Registration
from src.tw_tournament.domain.models import (
    PrizeTable,
    RoomDetails,
    Tournament,
    TournamentDefinition,
)
from src.tw_wallet.application.ledger import TransactionLedger
from src.tw_wallet.application.service import WalletApplicationService
from src.tw_wallet.domain.models import BalanceAccount, BalanceSplit, LedgerEntry, UserAccount


class FakeSession:
    def __init__(self) -> None:
        self._undo: list[Callable[[], None]] = []
        self.commits = 0
        self.rollbacks = 0

    def on_rollback(self, undo: Callable[[], None]) -> None:
        self._undo.append(undo)

    async def commit(self) -> None:
        self._undo.clear()
        self.commits += 1

    async def rollback(self) -> None:
        while self._undo:
            self._undo.pop()()
        self.rollbacks += 1


class FakeAccountRepository:
    def __init__(self) -> None:
        self.users: dict[str, dict[str, Any]] = {}
        self.conflicts_to_inject = 0

    def add_user(self, user_id: str, deposit: int = 0, winning: int = 0) -> None:
        self.users[user_id] = {
            "fullname": f"Player {user_id}",
            "email": f"{user_id}@example.com",
            "mobile": "9000000000",
            "age": 21,
            "state": "Goa",
            "deposit": deposit,
            "winning": winning,
            "version": 0,
        }

    def balance_of(self, user_id: str) -> tuple[int, int]:
        row = self.users[user_id]
        return row["deposit"], row["winning"]

    def _balance(self, user_id: str) -> BalanceAccount:
        row = self.users[user_id]
        return BalanceAccount(user_id, row["deposit"], row["winning"], row["version"])

    async def get_user_account(self, db: FakeSession, user_id: str) -> UserAccount | None:
        await asyncio.sleep(0)
        row = self.users.get(user_id)
        if row is None:
            return None
        return UserAccount(
            id=user_id,
            fullname=row["fullname"],
            email=row["email"],
            balance=self._balance(user_id),
            mobile=row["mobile"],
            age=row["age"],
            state=row["state"],
        )

    async def apply_debit(
        self, db: FakeSession, account: BalanceAccount, split: BalanceSplit
    ) -> BalanceAccount | None:
        await asyncio.sleep(0)
        if self.conflicts_to_inject > 0:
            self.conflicts_to_inject -= 1
            return None
        row = self.users.get(account.user_id)
        if (
            row is None
            or row["version"] != account.version
            or row["deposit"] < split.from_deposit
            or row["winning"] < split.from_winning
        ):
            return None
        row["deposit"] -= split.from_deposit
        row["winning"] -= split.from_winning
        row["version"] += 1

        def undo() -> None:
            row["deposit"] += split.from_deposit
            row["winning"] += split.from_winning

        db.on_rollback(undo)
        return self._balance(account.user_id)

    async def _credit(self, db: FakeSession, user_id: str, field: str, amount: int):
        await asyncio.sleep(0)
        row = self.users.get(user_id)
        if row is None:
            return None
        row[field] += amount
        row["version"] += 1

        def undo() -> None:
            row[field] -= amount

        db.on_rollback(undo)
        return self._balance(user_id)

    async def credit_deposit(self, db: FakeSession, user_id: str, amount: int):
        return await self._credit(db, user_id, "deposit", amount)

    async def credit_winning(self, db: FakeSession, user_id: str, amount: int):
        return await self._credit(db, user_id, "winning", amount)


class FakeTournamentRepository:
    def __init__(self) -> None:
        self.tournaments: dict[str, Tournament] = {}

    def add(self, tournament_id: str = "t-1", **overrides: Any) -> Tournament:
        fields: dict[str, Any] = {
            "id": tournament_id,
            "code": f"FF-{tournament_id.upper()}",
            "map": "Bermuda",
            "mode": "clash_squad",
            "team_size": "1vs1",
            "entry_fee": 4000,
            "winning_fee": 10000,
            "max_slots": 2,
            "start_time": datetime.now(UTC) + timedelta(days=1),
        }
        fields.update(overrides)
        tournament = Tournament(**fields)
        self.tournaments[tournament_id] = tournament
        return tournament

    async def get_tournament(self, db: FakeSession, tournament_id: str) -> Tournament | None:
        await asyncio.sleep(0)
        return self.tournaments.get(tournament_id)

    async def reserve_slot(
        self, db: FakeSession, tournament_id: str, user_id: str
    ) -> Tournament | None:
        await asyncio.sleep(0)
        # From here to the return there is no await: one atomic statement.
        current = self.tournaments.get(tournament_id)
        if (
            current is None
            or current.status != TournamentStatus.UPCOMING.value
            or current.registered_players >= current.max_slots
            or user_id in current.registered_user_ids
        ):
            return None
        updated = replace(
            current,
            registered_players=current.registered_players + 1,
            registered_user_ids=current.registered_user_ids + (user_id,),
            version=current.version + 1,
        )
        self.tournaments[tournament_id] = updated

        def undo() -> None:
            latest = self.tournaments[tournament_id]
            self.tournaments[tournament_id] = replace(
                latest,
                registered_players=latest.registered_players - 1,
                registered_user_ids=tuple(u for u in latest.registered_user_ids if u != user_id),
            )

        db.on_rollback(undo)
        return updated

    async def create_tournament(
        self, db: FakeSession, definition: TournamentDefinition
    ) -> Tournament:
        await asyncio.sleep(0)
        if any(t.code == definition.code for t in self.tournaments.values()):
            raise TournamentCodeExistsError(definition.code)
        tournament_id = f"t-{len(self.tournaments) + 1}"
        tournament = Tournament(id=tournament_id, **vars(definition))
        self.tournaments[tournament_id] = tournament
        db.on_rollback(lambda: self.tournaments.pop(tournament_id, None))
        return tournament

    async def update_status(
        self, db: FakeSession, tournament_id: str, expected_status: str, new_status: str
    ) -> Tournament | None:
        await asyncio.sleep(0)
        current = self.tournaments.get(tournament_id)
        if current is None or current.status != expected_status:
            return None
        updated = replace(current, status=new_status, version=current.version + 1)
        self.tournaments[tournament_id] = updated
        return updated

    async def update_room_details(
        self, db: FakeSession, tournament_id: str, room: RoomDetails
    ) -> Tournament | None:
        await asyncio.sleep(0)
        current = self.tournaments.get(tournament_id)
        if current is None:
            return None
        updated = replace(current, room=room, version=current.version + 1)
        self.tournaments[tournament_id] = updated
        db.on_rollback(lambda: self.tournaments.__setitem__(tournament_id, current))
        return updated

    async def update_prizes(
        self, db: FakeSession, tournament_id: str, prizes: PrizeTable
    ) -> Tournament | None:
        await asyncio.sleep(0)
        current = self.tournaments.get(tournament_id)
        if current is None:
            return None
        updated = replace(current, prizes=prizes, version=current.version + 1)
        self.tournaments[tournament_id] = updated
        db.on_rollback(lambda: self.tournaments.__setitem__(tournament_id, current))
        return updated


class FakeLedgerRepository:
    def __init__(self) -> None:
        self.entries: dict[tuple[str, str, str], LedgerEntry] = {}
        self._ids = itertools.count(1)
        self.fail_on_insert: Exception | None = None
        self.race_on_insert = False

    def seed(self, user_id: str, kind: str, amount: int, reference: str, reference_type: str):
        entry = LedgerEntry(
            id=next(self._ids),
            user_id=user_id,
            kind=kind,
            amount=amount,
            description="seeded",
            reference=reference,
            reference_type=reference_type,
        )
        self.entries[entry.dedupe_key] = entry
        return entry

    def for_user(self, user_id: str) -> list[LedgerEntry]:
        return [e for e in self.entries.values() if e.user_id == user_id]

    async def find_by_reference(
        self, db: FakeSession, user_id: str, reference: str, reference_type: str
    ) -> LedgerEntry | None:
        await asyncio.sleep(0)
        return self.entries.get((user_id, reference, reference_type))

    async def insert_entry(
        self,
        db: FakeSession,
        user_id: str,
        kind: str,
        amount: int,
        description: str,
        reference: str,
        reference_type: str,
        metadata: dict[str, Any],
    ) -> LedgerEntry:
        await asyncio.sleep(0)
        if self.fail_on_insert is not None:
            raise self.fail_on_insert
        key = (user_id, reference, reference_type)
        if self.race_on_insert:
            # Another writer commits the same key just before us
            self.race_on_insert = False
            self.seed(user_id, kind, amount, reference, reference_type)
        if key in self.entries:
            raise DuplicateReferenceError(reference, reference_type)
        entry = LedgerEntry(
            id=next(self._ids),
            user_id=user_id,
            kind=kind,
            amount=amount,
            description=description,
            reference=reference,
            reference_type=reference_type,
            metadata=dict(metadata),
        )
        self.entries[key] = entry
        db.on_rollback(lambda: self.entries.pop(key, None))
        return entry


class FakeRegistrationRepository:
    def __init__(self) -> None:
        self.rows: dict[str, Registration] = {}

    async def insert_registration(
        self, db: FakeSession, registration: Registration
    ) -> Registration:
        await asyncio.sleep(0)
        for row in self.rows.values():
            if row.tournament_id != registration.tournament_id:
                continue
            if row.user_id == registration.user_id:
                raise AlreadyRegisteredError(registration.tournament_id)
            if row.free_fire_id == registration.free_fire_id:
                raise FreeFireIdTakenError(registration.free_fire_id)
        stored = replace(registration, created_at=datetime.now(UTC))
        self.rows[stored.id] = stored
        db.on_rollback(lambda: self.rows.pop(stored.id, None))
        return stored

    async def free_fire_id_taken(
        self, db: FakeSession, tournament_id: str, free_fire_id: str
    ) -> bool:
        await asyncio.sleep(0)
        return any(
            r.tournament_id == tournament_id and r.free_fire_id == free_fire_id
            for r in self.rows.values()
        )

    async def get_by_user_tournament(
        self, db: FakeSession, user_id: str, tournament_id: str
    ) -> Registration | None:
        await asyncio.sleep(0)
        for row in self.rows.values():
            if row.user_id == user_id and row.tournament_id == tournament_id:
                return row
        return None


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def new_session() -> Callable[[], FakeSession]:
    return FakeSession


@pytest.fixture
def accounts() -> FakeAccountRepository:
    return FakeAccountRepository()


@pytest.fixture
def tournament_repo() -> FakeTournamentRepository:
    return FakeTournamentRepository()


@pytest.fixture
def ledger_repo() -> FakeLedgerRepository:
    return FakeLedgerRepository()


@pytest.fixture
def registration_repo() -> FakeRegistrationRepository:
    return FakeRegistrationRepository()


@pytest.fixture
def ledger(ledger_repo: FakeLedgerRepository) -> TransactionLedger:
    return TransactionLedger(repo=ledger_repo)


@pytest.fixture
def coordinator(
    tournament_repo: FakeTournamentRepository,
    accounts: FakeAccountRepository,
    ledger: TransactionLedger,
    registration_repo: FakeRegistrationRepository,
) -> RegistrationCoordinator:
    ids = itertools.count(1)
    return RegistrationCoordinator(
        tournaments=tournament_repo,
        accounts=accounts,
        ledger=ledger,
        registrations=registration_repo,
        max_attempts=3,
        backoff_seconds=0,
        id_factory=lambda: f"reg-{next(ids)}",
    )


@pytest.fixture
def award_coordinator(
    tournament_repo: FakeTournamentRepository,
    accounts: FakeAccountRepository,
    ledger: TransactionLedger,
) -> AwardCoordinator:
    return AwardCoordinator(tournaments=tournament_repo, accounts=accounts, ledger=ledger)


@pytest.fixture
def wallet_service(
    accounts: FakeAccountRepository, ledger: TransactionLedger
) -> WalletApplicationService:
    return WalletApplicationService(repo=accounts, ledger=ledger, max_attempts=3, backoff_seconds=0)
