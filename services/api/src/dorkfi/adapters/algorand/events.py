"""ARC-28 decoding of UserHealth logs emitted by the lending pool."""

import base64
import binascii
from typing import Any, Iterator

from algosdk import abi, encoding
from algosdk.error import ABIEncodingError

from services.api.src.dorkfi.domain.decoder import DecodeError

USER_HEALTH_SIGNATURE = "UserHealth(address,uint256,uint256,uint256,uint256)"

# ARC-28: selector is the first 4 bytes of SHA-512/256 over the event signature
USER_HEALTH_SELECTOR = encoding.checksum(USER_HEALTH_SIGNATURE.encode())[:4]

USER_HEALTH_ARGS = abi.ABIType.from_string("(address,uint256,uint256,uint256,uint256)")
USER_HEALTH_ARGS_LENGTH = 32 * 5


def decode_user_health_log(log: bytes) -> list[Any] | None:
    """
    Decode the arguments of one UserHealth log.

    Returns:
        [user_id, health_factor, total_collateral_value, total_borrow_value],
        or None if the log belongs to another event.

    Raises:
        DecodeError: If the selector matches but the payload is truncated.
    """
    if log[:4] != USER_HEALTH_SELECTOR:
        return None
    payload = log[4:4 + USER_HEALTH_ARGS_LENGTH]
    if len(payload) < USER_HEALTH_ARGS_LENGTH:
        raise DecodeError(None, f"UserHealth log payload is {len(payload)} bytes")
    try:
        return list(USER_HEALTH_ARGS.decode(payload))
    except (ABIEncodingError, ValueError) as e:
        raise DecodeError(None, f"UserHealth log payload: {e}") from e


def _iter_logs(txn: dict[str, Any]) -> Iterator[str]:
    """Logs of a transaction followed by the logs of its inner transactions."""
    yield from txn.get("logs") or []
    for inner in txn.get("inner-txns") or []:
        yield from _iter_logs(inner)


def extract_user_health_events(txn: dict[str, Any]) -> list[list[Any]]:
    """
    Turn one indexer transaction into positional UserHealth event tuples.

    Each tuple is [tx_id, round, timestamp, user_id, health_factor,
    total_collateral_value, total_borrow_value].
    """
    events = []
    for encoded in _iter_logs(txn):
        try:
            log = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(None, f"log is not base64: {e}") from e

        args = decode_user_health_log(log)
        if args is None:
            continue

        events.append([
            txn.get("id"),
            txn.get("confirmed-round"),
            txn.get("round-time"),
            *args,
        ])
    return events
