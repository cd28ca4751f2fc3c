"""
구조화 로깅 모듈

AlarmRelay 전체에서 사용하는 로깅 설정과 유틸리티를 제공합니다.
loguru 기반으로 구조화된 로깅을 지원합니다.

주요 기능:
- JSON 형식 출력 (CI/자동화 환경)
- 컬러 콘솔 출력 (개발 환경)
- 컨텍스트 바인딩 (stack, construct_path, run_id)
- 자동 run_id 생성
"""

import sys
import os
import uuid
from contextvars import ContextVar
from typing import Any
from functools import lru_cache

from loguru import logger


# 컨텍스트 변수: 합성 실행별 run_id 저장
_run_id_var: ContextVar[str | None] = ContextVar("run_id", default=None)
_stack_var: ContextVar[str | None] = ContextVar("stack", default=None)

_CONTEXT_KEYS = ("run_id", "stack", "construct_path")

# 콘솔 출력에 표시할 컨텍스트: (extra 키, 표시 이름, 색상)
_CONSOLE_CONTEXT = (
    ("run_id", "run", "yellow"),
    ("stack", "stack", "blue"),
    ("construct_path", "path", "magenta"),
)


def set_run_id(run_id: str) -> None:
    """run_id를 현재 컨텍스트에 설정합니다."""
    _run_id_var.set(run_id)


def generate_run_id() -> str:
    """새로운 run_id를 생성합니다."""
    return uuid.uuid4().hex[:12]


def set_stack_context(stack: str | None) -> None:
    """스택 이름을 현재 컨텍스트에 설정합니다."""
    _stack_var.set(stack)


def _get_context_extra() -> dict[str, Any]:
    """현재 컨텍스트의 추가 정보를 반환합니다."""
    extra: dict[str, Any] = {}

    run_id = _run_id_var.get()
    if run_id:
        extra["run_id"] = run_id

    stack = _stack_var.get()
    if stack:
        extra["stack"] = stack

    return extra


def _json_formatter(record: dict[str, Any]) -> str:
    """
    JSON 형식의 로그 포맷터

    CI 파이프라인에서 로그 수집기와 호환됩니다.
    """
    import orjson

    log_entry = {
        "timestamp": record["time"].strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
    }

    if record.get("extra"):
        for key in _CONTEXT_KEYS:
            if key in record["extra"]:
                log_entry[key] = record["extra"][key]

        for key, value in record["extra"].items():
            if key not in _CONTEXT_KEYS:
                log_entry[key] = value

    if record["exception"]:
        log_entry["exception"] = {
            "type": record["exception"].type.__name__ if record["exception"].type else None,
            "value": str(record["exception"].value) if record["exception"].value else None,
        }

    # loguru는 반환값을 포맷 문자열로 해석하므로 중괄호를 이스케이프합니다
    line = orjson.dumps(log_entry, default=str).decode("utf-8")
    return line.replace("{", "{{").replace("}", "}}") + "\n"


def _console_formatter(record: dict[str, Any]) -> str:
    """
    컬러 콘솔 형식의 로그 포맷터

    개발 환경에서 가독성을 높입니다.
    """
    fmt = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    fmt += "<level>{level: <8}</level> | "
    fmt += "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "

    extra = record.get("extra") or {}
    extra_parts = [
        f"<{color}>{label}={{extra[{key}]}}</{color}>"
        for key, label, color in _CONSOLE_CONTEXT
        if key in extra
    ]

    if extra_parts:
        fmt += " ".join(extra_parts) + " | "

    fmt += "<level>{message}</level>\n"

    if record["exception"]:
        fmt += "{exception}"

    return fmt


# 로그 레벨 매핑
_LOG_LEVELS = {
    "DEBUG": "DEBUG",
    "INFO": "INFO",
    "WARNING": "WARNING",
    "WARN": "WARNING",
    "ERROR": "ERROR",
    "CRITICAL": "CRITICAL",
}


def configure_logging(
    level: str = "INFO",
    json_output: bool | None = None,
    log_file: str | None = None,
) -> None:
    """
    로깅 설정을 초기화합니다.

    합성 결과를 표준 출력으로 내보낼 수 있도록 로그는 stderr로 보냅니다.

    Args:
        level: 로그 레벨 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: JSON 형식 출력 여부 (None이면 환경변수로 결정)
        log_file: 로그 파일 경로 (None이면 stderr만 출력)

    환경변수:
        LOG_LEVEL: 로그 레벨 (기본: INFO)
        LOG_FORMAT: 로그 포맷 (json 또는 console, 기본: console)
        LOG_FILE: 로그 파일 경로
    """
    env_level = os.getenv("LOG_LEVEL", level).upper()
    log_level = _LOG_LEVELS.get(env_level, "INFO")

    if json_output is None:
        json_output = os.getenv("LOG_FORMAT", "console").lower() == "json"

    if log_file is None:
        log_file = os.getenv("LOG_FILE")

    logger.remove()

    if json_output:
        logger.add(
            sys.stderr,
            format=_json_formatter,
            level=log_level,
            serialize=False,
        )
    else:
        logger.add(
            sys.stderr,
            format=_console_formatter,
            level=log_level,
            colorize=True,
        )

    if log_file:
        logger.add(
            log_file,
            format=_json_formatter,
            level=log_level,
            rotation="10 MB",
            retention="7 days",
        )

    logger.debug(
        f"로깅 설정 완료: level={log_level}, json={json_output}, file={log_file}"
    )


class BoundLogger:
    """
    컨텍스트가 바인딩된 로거

    호출 시점의 run_id/stack 컨텍스트와 키워드 인자를 extra로 함께 기록합니다.
    """

    def __init__(self, name: str) -> None:
        self._logger = logger.bind(name=name)

    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        extra = _get_context_extra()
        extra.update(kwargs)
        # 호출 위치는 BoundLogger 메서드를 부른 쪽으로 기록합니다
        self._logger.bind(**extra).opt(depth=2).log(level, message)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log("DEBUG", message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log("ERROR", message, **kwargs)


@lru_cache(maxsize=128)
def get_logger(name: str) -> BoundLogger:
    """
    모듈 로거를 반환합니다. 같은 이름이면 캐시된 인스턴스를 돌려줍니다.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("합성 시작")
    """
    return BoundLogger(name)


# 기본 로깅 설정 (모듈 임포트 시 실행)
# 애플리케이션에서 configure_logging()을 호출하여 재설정 가능
if not os.getenv("ALARM_RELAY_SKIP_DEFAULT_LOGGING"):
    configure_logging()
