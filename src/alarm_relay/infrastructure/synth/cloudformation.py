"""
CloudFormation 템플릿 합성기

선언 그래프를 CloudFormation JSON 문서로 변환합니다.

값 변환 규칙:
- Ref / GetAtt / Join / Split / Select → 대응하는 내장 함수
- Pending → {"Ref": Id}
- "${Id}" 조각이 포함된 문자열 → Fn::Sub
  (선언된 파라미터나 의사 파라미터가 아닌 "${X}"는 "${!X}"로 이스케이프)
- Known → 문자열
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

import orjson

from alarm_relay.common.errors import ErrorCode, SynthError
from alarm_relay.common.logging import get_logger
from alarm_relay.domain.models.construct import DeclarationGraph
from alarm_relay.domain.models.resources import Condition, Parameter, Resource
from alarm_relay.domain.models.values import (
    FRAGMENT_PATTERN,
    Aws,
    GetAtt,
    Join,
    Known,
    Pending,
    Ref,
    Select,
    Split,
)

logger = get_logger(__name__)

TEMPLATE_FORMAT_VERSION = "2010-09-09"


class TemplateSynthesizer:
    """
    템플릿 합성기

    한 번의 합성은 한 그래프에 대해 수행되며, 파라미터 목록은 합성 시작 시 고정됩니다.
    """

    def __init__(self, graph: DeclarationGraph) -> None:
        self._graph = graph
        constructs = graph.find_all()
        self._parameters = [c for c in constructs if isinstance(c, Parameter)]
        self._conditions = [c for c in constructs if isinstance(c, Condition)]
        self._resources = [c for c in constructs if isinstance(c, Resource)]
        self._declared = {p.logical_id for p in self._parameters}

    def synthesize(self) -> dict[str, Any]:
        """템플릿 딕셔너리를 만듭니다."""
        template: dict[str, Any] = {"AWSTemplateFormatVersion": TEMPLATE_FORMAT_VERSION}
        if self._graph.description:
            template["Description"] = self._graph.description
        if self._graph.metadata:
            template["Metadata"] = self.render(self._graph.metadata)
        if self._parameters:
            template["Parameters"] = {
                p.logical_id: p.to_template() for p in self._parameters
            }
        if self._conditions:
            template["Conditions"] = {
                c.logical_id: self.render(c.expression) for c in self._conditions
            }

        resources: dict[str, Any] = {}
        for resource in self._resources:
            logical_id = resource.logical_id
            if logical_id in resources:
                raise SynthError(
                    ErrorCode.SYNTH_FAILED,
                    f"논리 ID가 중복되었습니다: {logical_id}",
                    logical_id=logical_id,
                    details={"path": resource.node.path},
                )
            resources[logical_id] = self._render_resource(resource)
        template["Resources"] = resources

        logger.info(
            f"템플릿 합성 완료: {self._graph.name}",
            parameters=len(self._parameters),
            conditions=len(self._conditions),
            resources=len(resources),
        )
        return template

    def _render_resource(self, resource: Resource) -> dict[str, Any]:
        body: dict[str, Any] = {"Type": resource.resource_type}
        properties = self.render(resource.properties())
        if properties:
            body["Properties"] = properties
        if resource.condition is not None:
            body["Condition"] = resource.condition.logical_id
        metadata = dict(resource.metadata)
        metadata["aws:cdk:path"] = resource.node.path
        body["Metadata"] = self.render(metadata)
        return body

    def render(self, value: Any) -> Any:
        """값을 템플릿 표현으로 변환합니다."""
        if isinstance(value, Known):
            return self._render_string(value.value)
        if isinstance(value, Pending):
            return self._ref(value.placeholder_id)
        if isinstance(value, str):
            return self._render_string(value)
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, Ref):
            return {"Ref": value.target.logical_id}
        if isinstance(value, GetAtt):
            return {"Fn::GetAtt": [value.target.logical_id, value.attribute]}
        if isinstance(value, Join):
            return {"Fn::Join": [value.delimiter, [self.render(p) for p in value.parts]]}
        if isinstance(value, Split):
            return {"Fn::Split": [value.delimiter, self.render(value.source)]}
        if isinstance(value, Select):
            return {"Fn::Select": [value.index, self.render(value.source)]}
        if isinstance(value, dict):
            return {k: self.render(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self.render(v) for v in value]
        return value

    def _is_declared(self, name: str) -> bool:
        return name in self._declared or name in Aws.NAMES

    def _ref(self, name: str) -> dict[str, str]:
        if not self._is_declared(name):
            raise SynthError(
                ErrorCode.UNRESOLVED_REFERENCE,
                f"선언되지 않은 파라미터를 참조합니다: {name}",
                details={"reference": name},
            )
        return {"Ref": name}

    def _render_string(self, value: str) -> Any:
        names = [m.group(1) for m in FRAGMENT_PATTERN.finditer(value)]
        if not any(self._is_declared(n) for n in names):
            return value

        whole = FRAGMENT_PATTERN.fullmatch(value)
        if whole is not None:
            return {"Ref": whole.group(1)}

        # 다른 "${X}"는 Fn::Sub가 해석하지 않도록 이스케이프합니다
        escaped = FRAGMENT_PATTERN.sub(
            lambda m: m.group(0) if self._is_declared(m.group(1)) else "${!" + m.group(1) + "}",
            value,
        )
        return {"Fn::Sub": escaped}


def synthesize(graph: DeclarationGraph) -> dict[str, Any]:
    """
    선언 그래프를 CloudFormation 템플릿으로 합성합니다.

    Raises:
        SynthError: 선언되지 않은 파라미터를 참조하거나 논리 ID가 중복될 때
    """
    return TemplateSynthesizer(graph).synthesize()


def to_json(template: dict[str, Any]) -> bytes:
    """템플릿을 들여쓰기된 JSON으로 직렬화합니다."""
    return orjson.dumps(template, option=orjson.OPT_INDENT_2)


def write_template(
    graph: DeclarationGraph,
    outdir: str | Path,
    template: dict[str, Any] | None = None,
) -> Path:
    """
    템플릿을 "<outdir>/<stack>.template.json"에 기록합니다.

    Returns:
        기록한 파일 경로
    """
    if template is None:
        template = synthesize(graph)
    path = Path(outdir) / f"{graph.name}.template.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(to_json(template))

    logger.info(f"템플릿 기록: {path}", path=str(path))
    return path
