"""
데이터 모델 모듈

선언 그래프, 지연 값, 리소스, 토픽 참조, 파이프라인 입력 등 핵심 데이터 구조를 정의합니다.
"""

from alarm_relay.domain.models.construct import Construct, DeclarationGraph, Environment
from alarm_relay.domain.models.values import Aws, Deferred, Known, Pending, as_text, is_unresolved
from alarm_relay.domain.models.reference import (
    ImportedTopic,
    Raw,
    Resolved,
    Reference,
    Ok,
    Err,
    as_reference,
)
from alarm_relay.domain.models.resources import (
    ApiDestination,
    Condition,
    Connection,
    Parameter,
    Pipe,
    Queue,
    Resource,
    Subscription,
)
from alarm_relay.domain.models.pipeline import (
    ApiDestinationTarget,
    InputTransformation,
    PipelineInput,
    SourceSpec,
    SubscriptionOptions,
    TargetSpec,
)

__all__ = [
    # 선언 그래프
    "Construct",
    "DeclarationGraph",
    "Environment",
    # 지연 값
    "Aws",
    "Deferred",
    "Known",
    "Pending",
    "as_text",
    "is_unresolved",
    # 참조
    "ImportedTopic",
    "Raw",
    "Resolved",
    "Reference",
    "Ok",
    "Err",
    "as_reference",
    # 리소스
    "ApiDestination",
    "Condition",
    "Connection",
    "Parameter",
    "Pipe",
    "Queue",
    "Resource",
    "Subscription",
    # 파이프라인 입력
    "ApiDestinationTarget",
    "InputTransformation",
    "PipelineInput",
    "SourceSpec",
    "SubscriptionOptions",
    "TargetSpec",
]
