"""
Order number generation: CCH-<base36 epoch millis>-<6 random base36 chars>.
Always uppercase; lookups compare case-insensitively.
"""

import re
import secrets
from datetime import datetime, timezone
from typing import Optional

ORDER_NUMBER_PREFIX = "CCH"
RANDOM_PART_LENGTH = 6
BASE36_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"

ORDER_NUMBER_PATTERN = re.compile(rf"^{ORDER_NUMBER_PREFIX}-[0-9A-Z]+-[0-9A-Z]{{{RANDOM_PART_LENGTH}}}$")


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("base36 encoding requires a non-negative integer")
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(BASE36_ALPHABET[rem])
    return "".join(reversed(out))


def _epoch_millis(now: datetime) -> int:
    # Naive datetimes in this service are UTC
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return int(now.timestamp() * 1000)


def generate_order_number(now: Optional[datetime] = None) -> str:
    now = now or datetime.utcnow()
    random_part = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(RANDOM_PART_LENGTH))
    return f"{ORDER_NUMBER_PREFIX}-{to_base36(_epoch_millis(now))}-{random_part}"


def canonical_order_number(value: str) -> str:
    """Form used for lookups: trimmed and uppercased."""
    return (value or "").strip().upper()


def is_valid_order_number(value: str) -> bool:
    return bool(ORDER_NUMBER_PATTERN.match(canonical_order_number(value)))
