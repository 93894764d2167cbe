"""Integer minor-unit helpers for wallet amounts.

All fees, balances and ledger amounts are int cents (paise). No float, no
Decimal on the money path; two-decimal precision is exact by construction.
"""


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 4000 -> '$40.00', -1250 -> '-$12.50'."""
    if cents < 0:
        abs_cents = -cents
        return f"-${abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"${cents // 100:,}.{cents % 100:02d}"
