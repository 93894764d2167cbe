"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth
  2xxx: Wallet / ledger
  3xxx: Tournament
  4xxx: Registration
  9xxx: System
"""

from src.tw_common.cents import cents_to_display


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired token", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1006, "Admin access required", 403)


# --- 2xxx: Wallet / ledger ---

class InsufficientFundsError(AppError):
    def __init__(self, required: int, available: int) -> None:
        self.required = required
        self.available = available
        super().__init__(
            2001,
            f"Insufficient balance: you need {cents_to_display(required)} "
            f"but only have {cents_to_display(available)}",
            422,
        )


class UserNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(2002, f"User not found: {user_id}", 404)


class DuplicateReferenceError(AppError):
    """Raised by the ledger store when a concurrent append won the unique key.

    The ledger treats it as "entry already exists"; callers never see it.
    """

    def __init__(self, reference: str, reference_type: str) -> None:
        self.reference = reference
        self.reference_type = reference_type
        super().__init__(
            2003, f"Ledger entry already exists for {reference_type}={reference}", 409
        )


class InvalidAmountError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2004, f"Invalid amount: {detail}", 422)


# --- 3xxx: Tournament ---

class TournamentNotFoundError(AppError):
    def __init__(self, tournament_id: str) -> None:
        super().__init__(3001, f"Tournament not found: {tournament_id}", 404)


class TournamentClosedError(AppError):
    def __init__(self, tournament_id: str) -> None:
        super().__init__(3002, f"Tournament registration is closed: {tournament_id}", 422)


class TournamentFullError(AppError):
    def __init__(self, tournament_id: str) -> None:
        super().__init__(3003, f"Tournament is full: {tournament_id}", 422)


class InvalidTournamentError(AppError):
    def __init__(self, problems: list[str]) -> None:
        self.problems = problems
        super().__init__(3004, "Invalid tournament: " + "; ".join(problems), 422)


class TournamentNotCompletedError(AppError):
    def __init__(self, tournament_id: str) -> None:
        super().__init__(3005, f"Tournament is not completed: {tournament_id}", 422)


class InvalidStatusTransitionError(AppError):
    def __init__(self, current: str, requested: str) -> None:
        super().__init__(
            3006, f"Tournament status cannot move from {current} to {requested}", 422
        )


class TournamentCodeExistsError(AppError):
    def __init__(self, code: str) -> None:
        super().__init__(3007, f"Tournament code already exists: {code}", 409)


class RoomNotAvailableError(AppError):
    def __init__(self, tournament_id: str) -> None:
        super().__init__(3008, f"Room details are not available yet: {tournament_id}", 400)


# --- 4xxx: Registration ---

class AlreadyRegisteredError(AppError):
    def __init__(self, tournament_id: str) -> None:
        super().__init__(4001, f"Already registered for this tournament: {tournament_id}", 409)


class InvalidRegistrationInputError(AppError):
    def __init__(self, problems: list[str]) -> None:
        self.problems = problems
        super().__init__(4002, "; ".join(problems), 422)


class FreeFireIdTakenError(AppError):
    def __init__(self, free_fire_id: str) -> None:
        super().__init__(
            4003, f"Free Fire ID {free_fire_id} is already registered for this tournament", 409
        )


class RegistrationNotFoundError(AppError):
    def __init__(self, tournament_id: str) -> None:
        super().__init__(4004, f"Registration not found for tournament {tournament_id}", 404)


class NotRegisteredError(AppError):
    def __init__(self, tournament_id: str) -> None:
        super().__init__(
            4005, f"You are not registered for this tournament: {tournament_id}", 403
        )


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class TransientConflictError(AppError):
    """Concurrent mutation detected (version mismatch / lost race). Retryable."""

    def __init__(self, detail: str) -> None:
        super().__init__(9003, f"Concurrent update conflict, please retry: {detail}", 503)
