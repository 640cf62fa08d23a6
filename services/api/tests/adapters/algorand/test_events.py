"""Tests for ARC-28 UserHealth log decoding."""

import base64

import pytest
from algosdk import encoding

from services.api.src.dorkfi.adapters.algorand.events import (
    USER_HEALTH_ARGS,
    USER_HEALTH_SELECTOR,
    decode_user_health_log,
    extract_user_health_events,
)
from services.api.src.dorkfi.domain.decoder import DecodeError, decode_user_health

USER = encoding.encode_address(bytes(range(32)))


def make_log(user=USER, hf=1_600_000, collateral=8_000_000_000_000, borrow=4_000_000_000_000) -> bytes:
    return USER_HEALTH_SELECTOR + USER_HEALTH_ARGS.encode([user, hf, collateral, borrow])


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode()


class TestSelector:

    def test_selector_is_four_bytes_of_signature_hash(self):
        expected = encoding.checksum(
            b"UserHealth(address,uint256,uint256,uint256,uint256)"
        )[:4]

        assert USER_HEALTH_SELECTOR == expected
        assert len(USER_HEALTH_SELECTOR) == 4


class TestDecodeUserHealthLog:

    def test_decodes_arguments(self):
        args = decode_user_health_log(make_log())

        assert args == [USER, 1_600_000, 8_000_000_000_000, 4_000_000_000_000]

    def test_ignores_other_events(self):
        assert decode_user_health_log(b"\x00\x01\x02\x03" + bytes(160)) is None

    def test_ignores_short_non_matching_log(self):
        assert decode_user_health_log(b"hi") is None

    def test_rejects_truncated_payload(self):
        with pytest.raises(DecodeError):
            decode_user_health_log(make_log()[:100])

    def test_handles_uint256_values_beyond_64_bits(self):
        big = 2**200

        args = decode_user_health_log(make_log(collateral=big))

        assert args[2] == big


class TestExtractUserHealthEvents:

    def test_builds_positional_tuple(self):
        txn = {
            "id": "TXID1",
            "confirmed-round": 5000,
            "round-time": 1700000000,
            "logs": [b64(make_log())],
        }

        events = extract_user_health_events(txn)

        assert events == [[
            "TXID1", 5000, 1700000000, USER, 1_600_000, 8_000_000_000_000, 4_000_000_000_000,
        ]]

    def test_tuple_decodes_into_user_health_event(self):
        txn = {"id": "TXID1", "confirmed-round": 5000, "round-time": 1700000000, "logs": [b64(make_log())]}

        event = decode_user_health(extract_user_health_events(txn)[0])

        assert event.user_id == USER
        assert event.round == 5000
        assert event.timestamp == 1700000000

    def test_includes_inner_transaction_logs(self):
        txn = {
            "id": "OUTER",
            "confirmed-round": 10,
            "round-time": 20,
            "logs": [b64(b"unrelated log")],
            "inner-txns": [
                {"logs": [b64(make_log(hf=1))]},
                {"inner-txns": [{"logs": [b64(make_log(hf=2))]}]},
            ],
        }

        events = extract_user_health_events(txn)

        assert [e[0] for e in events] == ["OUTER", "OUTER"]
        assert [e[4] for e in events] == [1, 2]

    def test_transaction_without_logs(self):
        assert extract_user_health_events({"id": "TX", "confirmed-round": 1}) == []

    def test_rejects_invalid_base64(self):
        with pytest.raises(DecodeError):
            extract_user_health_events({"id": "TX", "logs": ["not base64!!"]})
