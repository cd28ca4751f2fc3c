"""
공통 유틸리티 모듈

에러 처리, 로깅, 짧은 식별자 생성 등 전체 애플리케이션에서 사용하는 공통 기능을 제공합니다.
"""

from alarm_relay.common.errors import (
    RelayError,
    InvalidReferenceFormat,
    ConstructError,
    ConfigError,
    TemplateError,
    SynthError,
    ErrorCode,
    get_exit_code,
)
from alarm_relay.common.hashing import short_id
from alarm_relay.common.logging import get_logger, configure_logging

__all__ = [
    # 에러
    "RelayError",
    "InvalidReferenceFormat",
    "ConstructError",
    "ConfigError",
    "TemplateError",
    "SynthError",
    "ErrorCode",
    "get_exit_code",
    # 식별자
    "short_id",
    # 로깅
    "get_logger",
    "configure_logging",
]
