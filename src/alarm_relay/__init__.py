"""
AlarmRelay - SNS 알람을 웹훅 대상으로 전달하는 선언형 파이프라인 구성기

SNS 토픽 → 필터 구독 → SQS 버퍼 → 입력 변환 → API 대상(Google Chat 등)으로 이어지는
전달 파이프라인을 선언하고 CloudFormation 템플릿으로 합성합니다.
"""

__version__ = "0.1.0"
__author__ = "AlarmRelay Team"

from alarm_relay.common.errors import (
    RelayError,
    InvalidReferenceFormat,
    ConfigError,
    ErrorCode,
)
from alarm_relay.common.logging import get_logger

__all__ = [
    "__version__",
    "RelayError",
    "InvalidReferenceFormat",
    "ConfigError",
    "ErrorCode",
    "get_logger",
]
