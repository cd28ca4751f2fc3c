"""
파이프라인 구성기

SNS 토픽에서 API 대상으로 메시지를 전달하는 파이프라인을 선언합니다.

    토픽 ──(필터 구독)──▶ SQS 버퍼 ──(EventBridge 파이프 + 입력 변환)──▶ API 대상

EventBridge 파이프는 SNS 토픽을 소스로 직접 쓸 수 없으므로 파이프라인마다
전용 SQS 큐를 버퍼로 만듭니다. 버퍼는 다른 파이프라인과 공유하지 않습니다.
구성은 한 번의 선언으로 끝나며 재시도를 하지 않습니다.
"""

from __future__ import annotations

from typing import Any

from alarm_relay.application.reference.topics import resolve_topic
from alarm_relay.common.logging import get_logger
from alarm_relay.domain.models.construct import Construct, DeclarationGraph
from alarm_relay.domain.models.pipeline import (
    DEFAULT_SUBSCRIPTION_OPTIONS,
    ApiDestinationTarget,
    InputTransformation,
    PipelineInput,
    TargetSpec,
)
from alarm_relay.domain.models.reference import ImportedTopic, Resolved, as_reference
from alarm_relay.domain.models.resources import (
    Condition,
    Pipe,
    Queue,
    QueueEncryption,
    Resource,
    Role,
    Subscription,
)
from alarm_relay.domain.models.values import Pending, concat, is_unresolved

logger = get_logger(__name__)

# SNS 봉투가 포함된 SQS 메시지에서 SNS 메시지 본문을 꺼냅니다
TRANSFORM_SQS_BODY_SNS_RAW = "<$.body.Message>"

# SQS 메시지 본문이 문자열일 때 그대로 꺼냅니다
TRANSFORM_SQS_BODY = "<$.body>"

# 본문이 JSON 문자열일 때 "<$.body>"만으로는 JSON으로 파싱되지 않으므로 객체로 감쌉니다
TRANSFORM_SQS_BODY_TO_DATA = '{"_data_":<$.body>}'


class ForwardingPipeline(Construct):
    """
    전달 파이프라인

    토픽 구독, 버퍼 큐, 파이프를 하나의 단위로 묶습니다.

    Attributes:
        source: 소스 토픽 참조
        buffer: 파이프라인 전용 버퍼 큐
        subscription: 토픽 → 버퍼 구독
        target: API 대상 + 입력 변환
        pipe: 버퍼 → 대상 파이프
        description: 파이프 설명
        condition: 파이프라인 전체에 적용된 생성 조건
    """

    def __init__(self, scope: Construct, id: str, spec: PipelineInput) -> None:
        # 입력 검증은 스코프에 등록하기 전에 끝냅니다
        subscription_options = spec.source.subscription.merged_over(DEFAULT_SUBSCRIPTION_OPTIONS)
        subscription_options.validate()
        source = self._resolve_source(scope, spec)

        super().__init__(scope, id)
        self.spec = spec
        self.condition: Condition | None = None

        if not isinstance(source, ImportedTopic):
            # 배포 시점 값은 합성 시점에 검증할 수 없으므로 외부 참조로 그대로 연결합니다
            source = ImportedTopic(self, "Source", source)
        self.source = source
        self.target = self._resolve_target(spec.target)

        self.buffer = Queue(
            self,
            "Queue",
            encryption=QueueEncryption.SQS_MANAGED,
            enforce_ssl=True,
        )
        self.buffer.suppress(
            "AwsSolutions-SQS3",
            "The queue only buffers messages for the pipe and is not used as a dead-letter queue",
        )

        self.subscription = Subscription(
            self,
            "Subscription",
            topic_arn=self.source.topic_arn,
            queue=self.buffer,
            raw_message_delivery=bool(subscription_options.raw_message_delivery),
            filter_policy=subscription_options.filter_policy,
            filter_policy_with_message_body=subscription_options.filter_policy_with_message_body,
            dead_letter_queue=subscription_options.dead_letter_queue,
        )
        self.source.add_subscription(self.subscription)
        self.buffer.add_to_resource_policy({
            "Action": "sqs:SendMessage",
            "Condition": {"ArnEquals": {"aws:SourceArn": self.source.topic_arn}},
            "Effect": "Allow",
            "Principal": {"Service": "sns.amazonaws.com"},
            "Resource": self.buffer.queue_arn,
        })

        self.description = spec.description or self._default_description()

        role = Role(self, "Role", assumed_by="pipes.amazonaws.com")
        role.add_to_policy({
            "Action": [
                "sqs:ReceiveMessage",
                "sqs:DeleteMessage",
                "sqs:GetQueueAttributes",
            ],
            "Effect": "Allow",
            "Resource": self.buffer.queue_arn,
        })
        role.add_to_policy({
            "Action": "events:InvokeApiDestination",
            "Effect": "Allow",
            "Resource": self.target.target_arn,
        })

        transformation = self.target.input_transformation
        self.pipe = Pipe(
            self,
            "Pipe",
            role=role,
            source_arn=self.buffer.queue_arn,
            target_arn=self.target.target_arn,
            input_template=transformation.input_template if transformation else None,
            description=self.description,
        )

        logger.info(
            f"파이프라인 선언: {self.node.path}",
            construct_path=self.node.path,
            source=str(self.source.topic_arn),
            raw_message_delivery=subscription_options.raw_message_delivery,
        )

    @property
    def resources(self) -> tuple[Resource, ...]:
        """조건 적용 대상 리소스 (버퍼, 파이프)"""
        return (self.buffer, self.pipe)

    def add_condition(self, condition: Condition) -> None:
        """
        버퍼 큐와 파이프에 같은 생성 조건을 적용합니다.

        큐 정책, 구독, 역할에는 조건을 걸지 않습니다.
        """
        self.condition = condition
        for resource in self.resources:
            resource.condition = condition
        logger.debug(
            f"파이프라인 조건 적용: {condition.node.id}",
            construct_path=self.node.path,
        )

    @staticmethod
    def _resolve_source(scope: Construct, spec: PipelineInput) -> ImportedTopic | str | Pending:
        """소스 토픽을 해석합니다. 배포 시점 값은 그대로 반환합니다."""
        reference = as_reference(spec.source.topic)
        if isinstance(reference, Resolved):
            return reference.handle
        if is_unresolved(reference.value):
            return reference.value
        return resolve_topic(scope, reference.value, spec.source.account_agnostic)

    @staticmethod
    def _resolve_target(target: TargetSpec) -> ApiDestinationTarget:
        if isinstance(target.destination, ApiDestinationTarget):
            return target.destination
        return ApiDestinationTarget(
            target.destination,
            target.input_template or InputTransformation(TRANSFORM_SQS_BODY_SNS_RAW),
        )

    def _default_description(self) -> Any:
        if isinstance(self.spec.target.destination, ApiDestinationTarget):
            target_name: Any = self.target.target_arn
        else:
            target_name = self.target.destination.api_destination_name
        return concat(
            "Forward messages from ",
            self.source.topic_name,
            " to ",
            target_name,
        )


class PipelineComposer:
    """
    파이프라인 구성기

    같은 그래프에서 만든 파이프라인은 토픽 참조 캐시를 공유합니다.

    Example:
        >>> composer = PipelineComposer(graph)
        >>> pipeline = composer.compose(
        ...     "AlarmPipe",
        ...     PipelineInput(
        ...         source=SourceSpec("alerts"),
        ...         target=TargetSpec(destination),
        ...     ),
        ... )
        >>> pipeline.add_condition(enabled)
    """

    def __init__(self, graph: DeclarationGraph) -> None:
        self._graph = graph

    def compose(
        self,
        pipeline_id: str,
        spec: PipelineInput,
        scope: Construct | None = None,
    ) -> ForwardingPipeline:
        """
        파이프라인을 선언합니다.

        Args:
            pipeline_id: 파이프라인 구성 ID
            spec: 파이프라인 입력
            scope: 파이프라인을 둘 스코프 (기본: 그래프 루트)

        Raises:
            InvalidReferenceFormat: 소스 토픽 참조 형식이 잘못되었을 때
        """
        return ForwardingPipeline(scope or self._graph, pipeline_id, spec)
