"""
토픽 참조 모델

이미 존재하는 SNS 토픽을 가리키는 참조 핸들과, 참조 입력을 구분하는 태그 타입,
그리고 실패 가능한 결과 타입을 정의합니다.

- Raw: 아직 해석되지 않은 문자열(토픽 이름, ARN, 지연 값)
- Resolved: 이미 해석된 ImportedTopic

입력의 종류는 호출 경계에서 as_reference()로 한 번만 결정합니다.

이 모듈은 외부 라이브러리에 의존하지 않습니다.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from alarm_relay.common.errors import InvalidReferenceFormat
from alarm_relay.domain.models.construct import Construct
from alarm_relay.domain.models.values import Deferred, Known, Pending, Select, Split, is_unresolved

T = TypeVar("T")


class ImportedTopic(Construct):
    """
    외부 SNS 토픽 참조

    스택 밖에서 관리되는 토픽을 가리키며 리소스를 생성하지 않습니다.

    Attributes:
        topic_arn: 토픽 ARN (정규 문자열 또는 Pending)
        account_agnostic: 리전/계정을 배포 시점에 결정하는지 여부
        subscriptions: 이 토픽에 추가된 구독 목록
    """

    def __init__(
        self,
        scope: Construct,
        id: str,
        topic_arn: str | Pending,
        account_agnostic: bool = False,
    ) -> None:
        super().__init__(scope, id)
        self.topic_arn = topic_arn
        self.account_agnostic = account_agnostic
        self.subscriptions: list[Construct] = []

    @property
    def topic_name(self) -> str | Select:
        """토픽 이름 (ARN의 마지막 구성 요소, 배포 시점 값이면 Fn::Select로 추출)"""
        name = self.topic_arn.rsplit(":", 1)[-1] if isinstance(self.topic_arn, str) else None
        if name is None or is_unresolved(name):
            return Select(5, Split(":", self.topic_arn))
        return name

    @property
    def fifo(self) -> bool:
        """FIFO 토픽 여부"""
        return isinstance(self.topic_arn, str) and self.topic_arn.endswith(".fifo")

    def add_subscription(self, subscription: Construct) -> None:
        """구독을 기록합니다."""
        self.subscriptions.append(subscription)


@dataclass(frozen=True)
class Raw:
    """해석 전 참조 (토픽 이름, ARN 또는 지연 값)"""

    value: str | Pending


@dataclass(frozen=True)
class Resolved:
    """이미 해석된 참조"""

    handle: ImportedTopic


Reference = Union[Raw, Resolved]

TopicRef = Union[str, Deferred, ImportedTopic, Raw, Resolved]


def as_reference(ref: TopicRef) -> Reference:
    """
    다양한 입력을 태그된 Reference로 변환합니다.

    Raises:
        TypeError: 지원하지 않는 입력 타입일 때
    """
    if isinstance(ref, (Raw, Resolved)):
        return ref
    if isinstance(ref, ImportedTopic):
        return Resolved(ref)
    if isinstance(ref, Known):
        return Raw(ref.value)
    if isinstance(ref, (str, Pending)):
        return Raw(ref)
    raise TypeError(f"토픽 참조로 사용할 수 없는 타입입니다: {type(ref).__name__}")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """성공 결과"""

    value: T

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """실패 결과"""

    error: InvalidReferenceFormat

    def unwrap(self):
        raise self.error


TopicResult = Union[Ok[ImportedTopic], Err]
