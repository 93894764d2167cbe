"""Fee split policy: deposit sub-balance first, winnings cover the remainder.

The order is fixed (not user-selectable) so the same balances and fee always
produce the same split.
"""

from src.tw_common.errors import InsufficientFundsError
from src.tw_wallet.domain.models import BalanceSplit


def compute_split(deposit_balance: int, winning_balance: int, required_fee: int) -> BalanceSplit:
    """Split `required_fee` cents across the two sub-balances.

    from_deposit = min(deposit, fee); from_winning = fee - from_deposit.
    Raises InsufficientFundsError when deposit + winning < fee.
    """
    if deposit_balance < 0 or winning_balance < 0:
        raise ValueError("Balances must be >= 0")
    if required_fee < 0:
        raise ValueError(f"Fee must be >= 0 cents, got {required_fee}")

    available = deposit_balance + winning_balance
    if available < required_fee:
        raise InsufficientFundsError(required_fee, available)

    from_deposit = min(deposit_balance, required_fee)
    return BalanceSplit(from_deposit=from_deposit, from_winning=required_fee - from_deposit)
