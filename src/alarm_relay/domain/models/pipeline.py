"""
파이프라인 입력 모델

전달 파이프라인(토픽 → 구독 → 버퍼 → 변환 → 대상)을 구성하기 위한
입력 데이터 구조를 정의합니다.

이 모듈은 외부 라이브러리에 의존하지 않습니다.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any

from alarm_relay.common.errors import ConfigError, ErrorCode
from alarm_relay.domain.models.reference import TopicRef
from alarm_relay.domain.models.resources import ApiDestination, Queue
from alarm_relay.domain.models.values import GetAtt


@dataclass(frozen=True)
class InputTransformation:
    """
    입력 변환

    파이프가 대상에 보내기 전에 적용하는 입력 템플릿입니다.
    "<$.body.Message>" 같은 경로 표현식을 포함할 수 있습니다.
    """

    input_template: str


@dataclass(frozen=True)
class SubscriptionOptions:
    """
    구독 옵션

    None인 필드는 "지정하지 않음"을 뜻하며 병합 시 기본값을 덮어쓰지 않습니다.

    Attributes:
        raw_message_delivery: SNS 봉투 없이 원문 전달 여부
        filter_policy: 메시지 속성 필터 정책
        filter_policy_with_message_body: 메시지 본문 필터 정책
        dead_letter_queue: 구독 전달 실패 시 사용할 큐
    """

    raw_message_delivery: bool | None = None
    filter_policy: dict[str, Any] | None = None
    filter_policy_with_message_body: dict[str, Any] | None = None
    dead_letter_queue: Queue | None = None

    def merged_over(self, defaults: "SubscriptionOptions") -> "SubscriptionOptions":
        """지정된 필드만 defaults 위에 덮어쓴 새 옵션을 반환합니다."""
        values = {
            f.name: getattr(self, f.name)
            if getattr(self, f.name) is not None
            else getattr(defaults, f.name)
            for f in fields(self)
        }
        return SubscriptionOptions(**values)

    def validate(self) -> None:
        """
        옵션 조합을 검증합니다.

        Raises:
            ConfigError: 두 필터 정책이 함께 지정되었을 때
        """
        if self.filter_policy and self.filter_policy_with_message_body:
            raise ConfigError(
                ErrorCode.CONFIG_INVALID,
                "filter_policy와 filter_policy_with_message_body는 함께 사용할 수 없습니다",
                field_name="filter_policy_with_message_body",
            )


DEFAULT_SUBSCRIPTION_OPTIONS = SubscriptionOptions(raw_message_delivery=True)


@dataclass(frozen=True)
class ApiDestinationTarget:
    """
    API 대상 + 입력 변환으로 이루어진 파이프 대상

    Attributes:
        destination: API 대상
        input_transformation: 입력 변환 (None이면 변환 없음)
    """

    destination: ApiDestination
    input_transformation: InputTransformation | None = None

    @property
    def target_arn(self) -> GetAtt:
        return self.destination.api_destination_arn


@dataclass
class SourceSpec:
    """
    파이프라인 소스

    Attributes:
        topic: 토픽 이름, ARN, 지연 값 또는 이미 해석된 토픽 참조
        subscription: 구독 옵션 (필터 정책 등)
        account_agnostic: 토픽 이름을 ARN으로 만들 때 리전/계정을 배포 시점에 결정할지 여부
    """

    topic: TopicRef
    subscription: SubscriptionOptions = field(default_factory=SubscriptionOptions)
    account_agnostic: bool = False


@dataclass
class TargetSpec:
    """
    파이프라인 대상

    destination이 ApiDestinationTarget이면 그대로 사용하고,
    ApiDestination이면 input_template(없으면 기본 변환)으로 감쌉니다.
    """

    destination: ApiDestination | ApiDestinationTarget
    input_template: InputTransformation | None = None


@dataclass
class PipelineInput:
    """
    파이프라인 구성 입력

    Example:
        >>> PipelineInput(
        ...     source=SourceSpec("alerts-topic"),
        ...     target=TargetSpec(destination),
        ... )
    """

    source: SourceSpec
    target: TargetSpec
    description: str | None = None
