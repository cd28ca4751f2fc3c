"""
컨텍스트 로더

컨텍스트 파일을 로드하고 Pydantic 스키마로 검증합니다.
명령행의 KEY=VALUE 재정의를 파일 값 위에 병합합니다.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

import orjson
from pydantic import ValidationError

from alarm_relay.common.errors import ConfigError, ErrorCode
from alarm_relay.common.logging import get_logger

from .schema import ContextFile

logger = get_logger(__name__)


class ContextLoader:
    """컨텍스트 파일 로딩과 재정의 병합을 담당합니다."""

    def __init__(self, default_path: str = "cdk.context.json") -> None:
        self._default_path = Path(default_path)

    def load_from_file(self, path: str | Path | None = None) -> dict[str, Any]:
        """파일에서 컨텍스트를 로드하고 검증합니다."""
        target = Path(path) if path else self._default_path

        if not target.exists():
            raise ConfigError(
                ErrorCode.CONFIG_NOT_FOUND,
                f"컨텍스트 파일을 찾을 수 없습니다: {target}",
                config_path=str(target),
            )

        try:
            data = orjson.loads(target.read_bytes())
        except orjson.JSONDecodeError as e:
            raise ConfigError(
                ErrorCode.CONFIG_PARSE_ERROR,
                f"컨텍스트 파일 파싱에 실패했습니다: {e}",
                config_path=str(target),
                details={"error": str(e)},
            ) from e

        if not isinstance(data, dict):
            raise ConfigError(
                ErrorCode.CONFIG_INVALID,
                "컨텍스트 파일의 최상위 값은 객체여야 합니다",
                config_path=str(target),
            )

        return self.load_from_dict(data, config_path=str(target))

    def load_from_dict(
        self,
        data: dict[str, Any],
        config_path: str | None = None,
    ) -> dict[str, Any]:
        """딕셔너리를 검증하고 컨텍스트로 반환합니다."""
        try:
            return ContextFile.model_validate(data).to_context()
        except ValidationError as e:
            errors = [
                {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
                for err in e.errors()
            ]
            logger.error("컨텍스트 검증 실패", errors=errors, config_path=config_path)
            raise ConfigError(
                ErrorCode.CONFIG_INVALID,
                "컨텍스트 검증에 실패했습니다",
                config_path=config_path,
                details={"errors": errors},
            ) from e

    @staticmethod
    def parse_overrides(pairs: Iterable[str]) -> dict[str, Any]:
        """
        KEY=VALUE 목록을 딕셔너리로 변환합니다.

        값이 "{" 또는 "["로 시작하면 JSON으로 해석합니다.

        Raises:
            ConfigError: "="가 없거나 JSON 값이 잘못되었을 때
        """
        overrides: dict[str, Any] = {}
        for pair in pairs:
            key, sep, value = pair.partition("=")
            key = key.strip()
            if not sep or not key:
                raise ConfigError(
                    ErrorCode.CONFIG_INVALID,
                    f"KEY=VALUE 형식이 아닙니다: {pair}",
                    field_name=key or None,
                )

            if value.lstrip().startswith(("{", "[")):
                try:
                    overrides[key] = orjson.loads(value)
                except orjson.JSONDecodeError as e:
                    raise ConfigError(
                        ErrorCode.CONFIG_PARSE_ERROR,
                        f"JSON 값 파싱에 실패했습니다: {key}",
                        field_name=key,
                        details={"error": str(e)},
                    ) from e
            else:
                overrides[key] = value
        return overrides

    @classmethod
    def merge(cls, base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
        """
        재정의를 기본 컨텍스트 위에 병합합니다.

        양쪽 값이 모두 객체이면 재귀적으로 병합하고, 그 외에는 재정의 값이 이깁니다.
        입력 딕셔너리는 수정하지 않습니다.
        """
        merged = dict(base)
        for key, value in overrides.items():
            current = merged.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                merged[key] = cls.merge(current, value)
            else:
                merged[key] = value
        return merged

    def load(
        self,
        path: str | Path | None = None,
        overrides: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        컨텍스트 파일(선택)과 재정의를 병합하고 검증합니다.

        path가 None이고 기본 파일도 없으면 빈 컨텍스트에서 시작합니다.
        """
        if path is None and not self._default_path.exists():
            base: dict[str, Any] = {}
            config_path = None
        else:
            base = self.load_from_file(path)
            config_path = str(path or self._default_path)

        merged = self.merge(base, overrides or {})
        context = self.load_from_dict(merged, config_path=config_path)
        logger.debug("컨텍스트 로드 완료", keys=sorted(context), config_path=config_path)
        return context
