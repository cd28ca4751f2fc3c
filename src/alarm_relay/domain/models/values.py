"""
지연 값과 템플릿 내장 함수

합성 시점에는 알 수 없고 배포 시점에 결정되는 값(스택 파라미터, 의사 파라미터)을
명시적인 합 타입으로 표현합니다. 이 모듈은 외부 라이브러리에 의존하지 않습니다.

- Known: 합성 시점에 확정된 문자열
- Pending: 배포 시점에 결정되는 플레이스홀더 (파라미터 ID)

문자열 안에 지연 값을 끼워 넣어야 할 때는 "${ParameterId}" 조각으로 렌더링합니다.
합성기는 이런 조각이 포함된 문자열을 Fn::Sub로 변환합니다.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from alarm_relay.domain.models.construct import Construct


# "${Id}" 형태의 지연 값 조각 (의사 파라미터 "AWS::Region" 포함)
FRAGMENT_PATTERN = re.compile(r"\$\{([A-Za-z0-9]+(?:::[A-Za-z0-9]+)?)\}")


@dataclass(frozen=True)
class Known:
    """합성 시점에 확정된 값"""

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Pending:
    """
    배포 시점에 결정되는 값

    Attributes:
        placeholder_id: 플레이스홀더(파라미터) 논리 ID 또는 의사 파라미터 이름
    """

    placeholder_id: str

    @property
    def fragment(self) -> str:
        """문자열에 끼워 넣을 때 사용하는 조각"""
        return "${" + self.placeholder_id + "}"

    def __str__(self) -> str:
        return self.fragment


Deferred = Union[Known, Pending]


class Aws:
    """배포 시점에 결정되는 의사 파라미터"""

    REGION = Pending("AWS::Region")
    ACCOUNT_ID = Pending("AWS::AccountId")
    PARTITION = Pending("AWS::Partition")
    STACK_NAME = Pending("AWS::StackName")

    NAMES = frozenset({
        "AWS::Region",
        "AWS::AccountId",
        "AWS::Partition",
        "AWS::StackName",
        "AWS::URLSuffix",
    })


def as_text(value: str | Deferred) -> str:
    """값을 문자열로 렌더링합니다. Pending은 "${Id}" 조각이 됩니다."""
    if isinstance(value, Known):
        return value.value
    if isinstance(value, Pending):
        return value.fragment
    return value


def is_unresolved(value: Any) -> bool:
    """값이 배포 시점에만 결정되는지 여부를 반환합니다."""
    if isinstance(value, Pending):
        return True
    if isinstance(value, Known):
        return False
    if isinstance(value, str):
        return FRAGMENT_PATTERN.search(value) is not None
    return isinstance(value, Intrinsic)


# === 템플릿 내장 함수 ===


class Intrinsic:
    """합성 시 CloudFormation 내장 함수로 변환되는 값의 기반 클래스"""


@dataclass(frozen=True, eq=False)
class Ref(Intrinsic):
    """리소스 또는 파라미터 참조 (Ref)"""

    target: "Construct"


@dataclass(frozen=True, eq=False)
class GetAtt(Intrinsic):
    """리소스 속성 참조 (Fn::GetAtt)"""

    target: "Construct"
    attribute: str


@dataclass(frozen=True)
class Join(Intrinsic):
    """문자열 연결 (Fn::Join)"""

    delimiter: str
    parts: tuple[Any, ...]


@dataclass(frozen=True)
class Split(Intrinsic):
    """문자열 분할 (Fn::Split)"""

    delimiter: str
    source: Any


@dataclass(frozen=True)
class Select(Intrinsic):
    """목록에서 항목 선택 (Fn::Select)"""

    index: int
    source: Any


def concat(*parts: Any) -> Any:
    """
    값들을 이어 붙입니다.

    모든 조각이 문자열(또는 지연 값)이면 문자열을 반환하고,
    내장 함수가 섞여 있으면 Join을 반환합니다.
    """
    if all(isinstance(p, (str, Known, Pending)) for p in parts):
        return "".join(as_text(p) for p in parts)
    return Join("", tuple(as_text(p) if isinstance(p, (Known, Pending)) else p for p in parts))
