"""
메시지 템플릿 엔진

알람 상태별 입력 템플릿(JSON)을 찾고 "{{name}}" 표식을 치환합니다.
템플릿 파일은 패키지 데이터(templates/*.json)로 배포되며 압축된 JSON 문자열로 사용됩니다.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from importlib import resources
from typing import Mapping

import orjson

from alarm_relay.common.errors import ErrorCode, TemplateError
from alarm_relay.common.logging import get_logger
from alarm_relay.domain.models.pipeline import InputTransformation
from alarm_relay.domain.models.values import Deferred, as_text

logger = get_logger(__name__)


class AlarmState(str, Enum):
    """CloudWatch 알람 상태"""

    OK = "OK"
    ALARM = "ALARM"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"


# 상태 → 템플릿 파일
# INSUFFICIENT_DATA는 전용 템플릿 없이 ALARM 템플릿을 재사용합니다 (의도된 정책)
_TEMPLATE_FILES: dict[AlarmState, str] = {
    AlarmState.ALARM: "cloudwatch-alarm-ALARM.json",
    AlarmState.OK: "cloudwatch-alarm-OK.json",
    AlarmState.INSUFFICIENT_DATA: "cloudwatch-alarm-ALARM.json",
}


@dataclass(frozen=True)
class PayloadTemplate:
    """
    상태별 페이로드 템플릿

    Attributes:
        state: 알람 상태
        raw_template: 치환 전 템플릿
        substitutions: 표식 이름 → 값
    """

    state: AlarmState
    raw_template: str
    substitutions: Mapping[str, str | Deferred] = field(default_factory=dict)

    @property
    def input_template(self) -> str:
        """치환이 적용된 템플릿"""
        return substitute(self.raw_template, self.substitutions)

    @property
    def transformation(self) -> InputTransformation:
        return InputTransformation(self.input_template)


def substitute(template: str, substitutions: Mapping[str, str | Deferred]) -> str:
    """
    "{{name}}" 표식을 한 번의 패스로 모두 치환합니다.

    - 긴 이름을 먼저 매칭하므로 접두어가 겹치는 이름끼리 충돌하지 않습니다.
    - 치환된 값은 다시 검사하지 않습니다.
    - 매핑에 없는 표식은 그대로 둡니다.
    - Pending 값은 "${Id}" 조각으로 들어가 합성 시 Fn::Sub로 변환됩니다.
    """
    if not substitutions:
        return template

    names = sorted(substitutions, key=len, reverse=True)
    pattern = re.compile(r"\{\{(" + "|".join(re.escape(n) for n in names) + r")\}\}")
    return pattern.sub(lambda m: as_text(substitutions[m.group(1)]), template)


class MessageTemplateEngine:
    """
    메시지 템플릿 엔진

    Example:
        >>> engine = MessageTemplateEngine()
        >>> template = engine.get_template("ALARM", {"title": "ProjectA", "icon": "https://a/icon.png"})
        >>> "{{title}}" in template.input_template
        False
    """

    def __init__(self, templates: Mapping[AlarmState, str] | None = None) -> None:
        """
        Args:
            templates: 상태 → 원본 템플릿 (None이면 패키지 템플릿 사용)
        """
        self._templates: dict[AlarmState, str] = dict(templates or {})

    def get_template(
        self,
        state: AlarmState | str,
        substitutions: Mapping[str, str | Deferred] | None = None,
    ) -> PayloadTemplate:
        """
        상태별 템플릿을 반환합니다.

        Args:
            state: 알람 상태 (ALARM, OK, INSUFFICIENT_DATA)
            substitutions: 표식 이름 → 값 (None이면 원본 그대로)

        Raises:
            TemplateError: 알 수 없는 상태이거나 템플릿 파일이 없을 때
        """
        alarm_state = self._parse_state(state)
        raw = self._load(alarm_state)
        return PayloadTemplate(alarm_state, raw, dict(substitutions or {}))

    def _load(self, state: AlarmState) -> str:
        if state not in self._templates:
            self._templates[state] = load_packaged_template(_TEMPLATE_FILES[state], state)
        return self._templates[state]

    @staticmethod
    def _parse_state(state: AlarmState | str) -> AlarmState:
        try:
            return AlarmState(state)
        except ValueError as e:
            raise TemplateError(
                ErrorCode.UNKNOWN_STATE,
                f"알 수 없는 알람 상태입니다: {state}",
                state=str(state),
                details={"allowed": [s.value for s in AlarmState]},
            ) from e


def load_packaged_template(filename: str, state: AlarmState) -> str:
    """패키지 데이터에서 템플릿을 읽어 압축된 JSON 문자열로 반환합니다."""
    path = resources.files(__package__) / "templates" / filename
    try:
        content = path.read_bytes()
    except FileNotFoundError as e:
        raise TemplateError(
            ErrorCode.TEMPLATE_NOT_FOUND,
            f"템플릿 파일을 찾을 수 없습니다: {filename}",
            state=state.value,
        ) from e

    logger.debug(f"템플릿 로드: {filename}", state=state.value)
    return orjson.dumps(orjson.loads(content)).decode("utf-8")


_default_engine = MessageTemplateEngine()


def get_template(
    state: AlarmState | str,
    substitutions: Mapping[str, str | Deferred] | None = None,
) -> PayloadTemplate:
    """기본 엔진으로 상태별 템플릿을 반환합니다."""
    return _default_engine.get_template(state, substitutions)
