"""
Single-use virtual credit cards.

Card numbers have 15 digits. A new number is issued for every purchase,
and the account it draws from is encoded in its first two digits.
"""

import re

CARD_NUMBER_LENGTH = 15
ACCOUNT_PREFIX_LENGTH = 2

_CARD_NUMBER_RE = re.compile(r"[0-9]{%d}" % CARD_NUMBER_LENGTH)


def is_valid_card_number(card_number) -> bool:
    # ASCII digits only: str.isdigit() would also accept other scripts' digits
    return isinstance(card_number, str) and _CARD_NUMBER_RE.fullmatch(card_number) is not None


def account_number(card_number: str) -> str:
    """Return the account number the card draws from."""
    if not is_valid_card_number(card_number):
        raise ValueError("invalid card number format")
    return card_number[:ACCOUNT_PREFIX_LENGTH]


def mask_card_number(card_number) -> str:
    if isinstance(card_number, str) and len(card_number) > 4:
        return f"***{card_number[-4:]}"
    return "***REDACTED***"
