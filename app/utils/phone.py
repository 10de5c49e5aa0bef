"""
Phone number normalization.
The normalized form is the join key for cooldown checks and citizen profile
upserts, so every spelling of the same number must map to one string.
"""

import re

_NON_DIGITS = re.compile(r"\D")

DOMESTIC_COUNTRY_CODE = "1"
MIN_PHONE_DIGITS = 10


def digits_only(phone: str) -> str:
    """Strip everything except 0-9."""
    return _NON_DIGITS.sub("", phone or "")


def has_enough_digits(phone: str) -> bool:
    return len(digits_only(phone)) >= MIN_PHONE_DIGITS


def normalize_phone_number(phone: str) -> str:
    """
    Normalize to an E.164-like string.

    10 digits            -> +1XXXXXXXXXX
    11 digits, leading 1 -> +1XXXXXXXXXX
    anything else        -> + followed by the digits

    Raises ValueError when fewer than MIN_PHONE_DIGITS digits are present.
    """
    digits = digits_only(phone)
    if len(digits) < MIN_PHONE_DIGITS:
        raise ValueError(f"Phone number must contain at least {MIN_PHONE_DIGITS} digits")
    if len(digits) == 10:
        return f"+{DOMESTIC_COUNTRY_CODE}{digits}"
    return f"+{digits}"


def mask_phone_number(phone: str) -> str:
    """For logs: keep only the last four digits."""
    digits = digits_only(phone)
    return f"***{digits[-4:]}" if digits else "***"
