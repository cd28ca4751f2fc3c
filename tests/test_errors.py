"""Tests for ``alarm_relay.common.errors``."""

from __future__ import annotations

import pytest

from alarm_relay.common.errors import (
    ConfigError,
    ErrorCode,
    InvalidReferenceFormat,
    SynthError,
    get_exit_code,
)


class TestExitCodes:
    @pytest.mark.parametrize(
        ("code", "expected"),
        [
            (ErrorCode.CONFIG_INVALID, 2),
            (ErrorCode.INVALID_REFERENCE_FORMAT, 3),
            (ErrorCode.UNRESOLVED_REFERENCE, 4),
            (ErrorCode.INTERNAL_ERROR, 1),
        ],
    )
    def test_mapping(self, code, expected):
        assert get_exit_code(code) == expected

    def test_exception_exit_code(self):
        assert SynthError(ErrorCode.SYNTH_FAILED, "boom").exit_code == 4


class TestToDict:
    def test_reference_error(self):
        assert InvalidReferenceFormat("!!!").to_dict() == {
            "code": "INVALID_REFERENCE_FORMAT",
            "message": "SNS 토픽 ARN 또는 토픽 이름 형식이 아닙니다: !!!",
            "details": {"reference": "!!!"},
        }

    def test_config_error_details(self):
        error = ConfigError(
            ErrorCode.CONFIG_INVALID,
            "bad",
            config_path="cdk.context.json",
            field_name="Endpoint",
        )
        assert error.to_dict()["details"] == {
            "config_path": "cdk.context.json",
            "field_name": "Endpoint",
        }
