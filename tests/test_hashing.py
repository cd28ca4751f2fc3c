"""Tests for ``alarm_relay.common.hashing``."""

from __future__ import annotations

import hashlib
import re

from alarm_relay.common.hashing import short_id


class TestShortId:
    def test_deterministic(self):
        assert short_id("arn:aws:sns:us-east-1:123456789012:alerts") == short_id(
            "arn:aws:sns:us-east-1:123456789012:alerts"
        )

    def test_default_length_is_eight_hex_chars(self):
        value = short_id("alerts")
        assert len(value) == 8
        assert re.fullmatch(r"[0-9A-F]{8}", value)

    def test_custom_length(self):
        assert len(short_id("alerts", 6)) == 12

    def test_distinct_inputs(self):
        assert short_id("alerts") != short_id("alerts2")

    def test_matches_shake_256(self):
        expected = hashlib.shake_256(b"Pipe1/Queue").hexdigest(4).upper()
        assert short_id("Pipe1/Queue") == expected
