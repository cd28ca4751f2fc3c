"""
CloudWatch 알람 → Google Chat 릴레이 스택

소스 SNS 토픽의 CloudWatch 알람 메시지를 Google Chat 스페이스로 전달하는
전체 토폴로지를 하나의 선언 그래프로 구성합니다.

    소스 토픽 ─┬─(AlarmArn 존재 필터)─▶ OK 파이프라인 ─────┐
               └─(AlarmArn 존재 필터)─▶ ALARM 파이프라인 ──┴─▶ Google Chat API 대상

설정 값(토픽, 메시지 제목/아이콘, 스페이스 라벨/엔드포인트)은 컨텍스트에 있으면
그대로 쓰고, 없으면 배포 파라미터로 남겨 배포 시점에 받습니다.
"""

from __future__ import annotations

from typing import Any

from alarm_relay.application.config.resolver import (
    SOURCE_TOPIC,
    ChatSettings,
    ConfigurationResolver,
)
from alarm_relay.application.destination.google_chat import (
    GoogleChatApiDestination,
    GoogleChatWebhookConnection,
)
from alarm_relay.application.message.engine import AlarmState, MessageTemplateEngine
from alarm_relay.application.pipeline.composer import ForwardingPipeline, PipelineComposer
from alarm_relay.common.logging import get_logger, set_stack_context
from alarm_relay.domain.models.construct import DeclarationGraph, Environment
from alarm_relay.domain.models.pipeline import (
    PipelineInput,
    SourceSpec,
    SubscriptionOptions,
    TargetSpec,
)
from alarm_relay.domain.models.resources import exists_filter
from alarm_relay.domain.models.values import as_text

logger = get_logger(__name__)

DEFAULT_STACK_NAME = "CloudWatchAlertsToGoogleChatSpace"

DEFAULT_DESCRIPTION = (
    "Creates EventBridge pipes that forward CloudWatch alarm messages from an SNS topic "
    "to a Google Chat space through an API destination."
)

# 파이프라인을 만드는 알람 상태
# INSUFFICIENT_DATA는 따로 전달하지 않습니다
RELAYED_STATES: tuple[AlarmState, ...] = (AlarmState.OK, AlarmState.ALARM)

# 템플릿 메타데이터로 기록할 컨텍스트 키
REPOSITORY_CONTEXT_KEY = "metadata:repo"


class AlarmRelayStack:
    """
    알람 릴레이 스택

    생성자에서 모든 선언을 마치며, graph를 합성기에 넘기면 템플릿을 얻을 수 있습니다.

    Attributes:
        graph: 선언 그래프
        chat: 해석된 Google Chat 설정
        destination: Google Chat API 대상
        pipelines: 알람 상태 → 파이프라인

    Example:
        >>> stack = AlarmRelayStack(
        ...     context={"SourceSNSTopic": "alerts"},
        ...     env=Environment(region="us-east-1", account="123456789012"),
        ... )
        >>> template = synthesize(stack.graph)
    """

    def __init__(
        self,
        name: str = DEFAULT_STACK_NAME,
        env: Environment | None = None,
        context: dict[str, Any] | None = None,
        description: str | None = None,
        engine: MessageTemplateEngine | None = None,
    ) -> None:
        self.graph = DeclarationGraph(
            name,
            env=env,
            context=context,
            description=description or DEFAULT_DESCRIPTION,
        )
        set_stack_context(self.graph.name)
        self._engine = engine or MessageTemplateEngine()
        self._resolver = ConfigurationResolver(self.graph)
        self._composer = PipelineComposer(self.graph)

        repository = self.graph.try_get_context(REPOSITORY_CONTEXT_KEY)
        if repository:
            self.graph.add_metadata("Repository", repository)

        source_topic = self._resolver.resolve_definition(SOURCE_TOPIC)
        self.chat: ChatSettings = self._resolver.resolve_chat_settings()

        label = self.chat.space.label.value
        connection = GoogleChatWebhookConnection(self.graph, label)
        self.destination = GoogleChatApiDestination(
            self.graph,
            "ApiDestination",
            space=label,
            endpoint=self.chat.space.endpoint.value,
            connection=connection,
            description=f"Forward messages to Google Chat space {as_text(label)}",
        )

        self.pipelines: dict[AlarmState, ForwardingPipeline] = {}
        for state in RELAYED_STATES:
            self.pipelines[state] = self._add_state_pipeline(state, source_topic.value)

        logger.info(
            f"스택 선언 완료: {self.graph.name}",
            stack=self.graph.name,
            pipelines=len(self.pipelines),
            source=source_topic.display_value,
        )

    def _add_state_pipeline(self, state: AlarmState, source_topic: Any) -> ForwardingPipeline:
        template = self._engine.get_template(
            state,
            {
                "title": self.chat.message_title.value,
                "icon": self.chat.message_icon.value,
            },
        )
        label = as_text(self.chat.space.label.value)
        return self._composer.compose(
            f"GoogleChat-CloudWatchAlarm-{state.value}",
            PipelineInput(
                source=SourceSpec(
                    topic=source_topic,
                    subscription=SubscriptionOptions(
                        filter_policy_with_message_body={"AlarmArn": exists_filter()},
                    ),
                ),
                target=TargetSpec(
                    destination=self.destination,
                    input_template=template.transformation,
                ),
                description=f"Forward CloudWatch Alert messages from SNS to Google Chat space {label}",
            ),
        )
