"""Decoding of positional UserHealth event tuples."""

from decimal import Decimal
from typing import Any, Iterable, Sequence

from services.api.src.dorkfi.domain.models import UserHealthEvent

# Collateral and borrow values are emitted with two compounded 1e6 scalings
VALUE_SCALE = Decimal(10) ** 12
HEALTH_FACTOR_SCALE = Decimal(10) ** 6

# Positions in the event tuple: [tx_id, round, timestamp, user_id, hf, collateral, borrow]
TX_ID_INDEX = 0
ROUND_INDEX = 1
TIMESTAMP_INDEX = 2
USER_ID_INDEX = 3
HEALTH_FACTOR_INDEX = 4
COLLATERAL_INDEX = 5
BORROW_INDEX = 6
EVENT_LENGTH = 7


class DecodeError(Exception):
    """Raised when an event tuple is malformed."""

    def __init__(self, index: int | None, reason: str):
        self.index = index
        self.reason = reason
        if index is None:
            super().__init__(f"Malformed UserHealth event: {reason}")
        else:
            super().__init__(f"Malformed UserHealth event field {index}: {reason}")


def _get_item(raw: Sequence[Any], index: int) -> Any:
    value = raw[index]
    if value is None:
        raise DecodeError(index, "missing value")
    return value


def _to_int(raw: Sequence[Any], index: int) -> int:
    """Read a non-negative integer field (int or decimal string)."""
    value = _get_item(raw, index)
    if isinstance(value, bool):
        raise DecodeError(index, f"expected integer, got {value!r}")
    if isinstance(value, int):
        result = value
    elif isinstance(value, str) and value.strip().isdecimal():
        result = int(value.strip())
    elif isinstance(value, Decimal) and value.is_finite() and value == value.to_integral_value():
        result = int(value)
    else:
        raise DecodeError(index, f"expected integer, got {value!r}")
    if result < 0:
        raise DecodeError(index, f"negative value {result}")
    return result


def _to_scaled(raw: Sequence[Any], index: int, scale: Decimal) -> Decimal:
    return Decimal(_to_int(raw, index)) / scale


def decode_user_health(
    raw: Sequence[Any], scale: Decimal = VALUE_SCALE
) -> UserHealthEvent:
    """Decode one UserHealth event tuple.

    Raises:
        DecodeError: If the tuple is too short or a field is missing or not numeric.
    """
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raise DecodeError(None, f"expected a sequence, got {type(raw).__name__}")
    if len(raw) < EVENT_LENGTH:
        raise DecodeError(None, f"expected {EVENT_LENGTH} fields, got {len(raw)}")

    user_id = _get_item(raw, USER_ID_INDEX)
    if not isinstance(user_id, str) or not user_id:
        raise DecodeError(USER_ID_INDEX, f"expected address string, got {user_id!r}")

    tx_id = raw[TX_ID_INDEX]

    return UserHealthEvent(
        timestamp=_to_int(raw, TIMESTAMP_INDEX),
        round=_to_int(raw, ROUND_INDEX),
        user_id=user_id,
        total_collateral_value=_to_scaled(raw, COLLATERAL_INDEX, scale),
        total_borrow_value=_to_scaled(raw, BORROW_INDEX, scale),
        reported_health_factor=_to_scaled(raw, HEALTH_FACTOR_INDEX, HEALTH_FACTOR_SCALE),
        tx_id=str(tx_id) if tx_id is not None else None,
    )


def decode_user_health_events(
    raws: Iterable[Sequence[Any]], scale: Decimal = VALUE_SCALE
) -> list[UserHealthEvent]:
    """Decode a batch of event tuples, failing on the first malformed one."""
    return [decode_user_health(raw, scale) for raw in raws]
