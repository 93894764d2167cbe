"""Global enums — values must match the DB CHECK constraints exactly."""

from enum import Enum


class TournamentStatus(str, Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"


class TournamentMode(str, Enum):
    CLASH_SQUAD = "clash_squad"
    BATTLE_ROYAL = "battle_royal"
    LONE_WOLF = "lone_wolf"


class TeamSize(str, Enum):
    SOLO = "1vs1"
    DUO = "2v2"
    SQUAD = "4v4"
    SIX = "6v6"


class TeamSelection(str, Enum):
    TEAM_A = "team_a"
    TEAM_B = "team_b"


class TransactionKind(str, Enum):
    # Credits
    DEPOSIT = "deposit"
    WINNING = "winning"
    # Debits
    ENTRY_FEE = "entry_fee"
    WITHDRAWAL = "withdrawal"


class ReferenceType(str, Enum):
    PAYMENT_ID = "payment_id"
    TOURNAMENT_ID = "tournament_id"
    WITHDRAWAL_ID = "withdrawal_id"


class TransactionStatus(str, Enum):
    COMPLETED = "completed"
    PENDING = "pending"
    FAILED = "failed"


class RegistrationStatus(str, Enum):
    REGISTERED = "registered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    WALLET = "wallet"
    DIRECT = "direct"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


CREDIT_KINDS = frozenset({TransactionKind.DEPOSIT, TransactionKind.WINNING})

# Team sizes with more than one member per side need a team pick at sign-up
MULTI_MEMBER_TEAM_SIZES = frozenset({TeamSize.DUO, TeamSize.SQUAD, TeamSize.SIX})

# Modes that must declare a team size
TEAM_SIZE_REQUIRED_MODES = frozenset({TournamentMode.CLASH_SQUAD, TournamentMode.LONE_WOLF})

BATTLE_ROYAL_SLOTS = 48
