"""Tests for ``alarm_relay.application.pipeline.composer``."""

from __future__ import annotations

import pytest

from alarm_relay.application.pipeline.composer import (
    TRANSFORM_SQS_BODY,
    TRANSFORM_SQS_BODY_SNS_RAW,
    PipelineComposer,
)
from alarm_relay.application.reference.topics import resolve_topic
from alarm_relay.common.errors import ConfigError, ConstructError, ErrorCode, InvalidReferenceFormat
from alarm_relay.domain.models.pipeline import (
    ApiDestinationTarget,
    InputTransformation,
    PipelineInput,
    SourceSpec,
    SubscriptionOptions,
    TargetSpec,
)
from alarm_relay.domain.models.reference import ImportedTopic
from alarm_relay.domain.models.resources import (
    Condition,
    Parameter,
    Queue,
    Resource,
    Subscription,
    exists_filter,
)
from alarm_relay.domain.models.values import Join, Pending, Select
from alarm_relay.infrastructure.synth.cloudformation import synthesize

ARN = "arn:aws:sns:us-east-1:123456789012:my-topic"


def _spec(topic="my-topic", destination=None, **kwargs) -> PipelineInput:
    subscription = kwargs.pop("subscription", SubscriptionOptions())
    return PipelineInput(
        source=SourceSpec(topic, subscription=subscription),
        target=TargetSpec(destination, input_template=kwargs.pop("input_template", None)),
        **kwargs,
    )


class TestComposeSource:
    def test_canonical_reference(self, graph, destination):
        pipeline = PipelineComposer(graph).compose("Pipe1", _spec(destination=destination))
        assert pipeline.source.topic_arn == ARN
        assert pipeline.subscription.topic_arn == ARN

    def test_pipelines_share_topic_handle(self, graph, destination):
        composer = PipelineComposer(graph)
        first = composer.compose("Pipe1", _spec(destination=destination))
        second = composer.compose("Pipe2", _spec(ARN, destination=destination))
        assert first.source is second.source
        assert first.source.subscriptions == [first.subscription, second.subscription]

    def test_resolved_handle_used_verbatim(self, graph, destination):
        topic = resolve_topic(graph, "my-topic")
        pipeline = PipelineComposer(graph).compose("Pipe1", _spec(topic, destination=destination))
        assert pipeline.source is topic

    def test_unresolved_source_is_external_reference(self, graph, destination):
        Parameter(graph, "SourceSNSTopic")
        pipeline = PipelineComposer(graph).compose(
            "Pipe1", _spec(Pending("SourceSNSTopic"), destination=destination)
        )
        assert isinstance(pipeline.source, ImportedTopic)
        assert pipeline.source.node.id == "Source"
        assert pipeline.source.node.scope is pipeline
        assert pipeline.source.topic_arn == Pending("SourceSNSTopic")
        assert graph.topic_cache == {}

    def test_malformed_source(self, graph, destination):
        with pytest.raises(InvalidReferenceFormat):
            PipelineComposer(graph).compose("Pipe1", _spec("!!!", destination=destination))

    def test_malformed_source_leaves_graph_untouched(self, graph, destination):
        composer = PipelineComposer(graph)
        before = [c.node.path for c in graph.find_all()]
        with pytest.raises(InvalidReferenceFormat):
            composer.compose("Pipe1", _spec("!!!", destination=destination))
        assert [c.node.path for c in graph.find_all()] == before

        pipeline = composer.compose("Pipe1", _spec(destination=destination))
        assert pipeline.source.topic_arn == ARN


class TestComposeSubscription:
    def test_raw_message_delivery_default(self, graph, destination):
        pipeline = PipelineComposer(graph).compose("Pipe1", _spec(destination=destination))
        assert pipeline.subscription.raw_message_delivery is True
        assert pipeline.subscription.properties()["RawMessageDelivery"] is True

    def test_explicit_options_win(self, graph, destination):
        pipeline = PipelineComposer(graph).compose(
            "Pipe1",
            _spec(
                destination=destination,
                subscription=SubscriptionOptions(
                    raw_message_delivery=False,
                    filter_policy_with_message_body={"AlarmArn": exists_filter()},
                ),
            ),
        )
        props = pipeline.subscription.properties()
        assert "RawMessageDelivery" not in props
        assert props["FilterPolicy"] == {"AlarmArn": [{"exists": True}]}
        assert props["FilterPolicyScope"] == "MessageBody"

    def test_both_filter_policies_rejected(self, graph, destination):
        before = [c.node.path for c in graph.find_all()]
        with pytest.raises(ConfigError) as exc_info:
            PipelineComposer(graph).compose(
                "Pipe1",
                _spec(
                    destination=destination,
                    subscription=SubscriptionOptions(
                        filter_policy={"a": ["b"]},
                        filter_policy_with_message_body={"c": ["d"]},
                    ),
                ),
            )

        assert exc_info.value.code == ErrorCode.CONFIG_INVALID
        assert [c.node.path for c in graph.find_all()] == before
        assert "Resources" in synthesize(graph)

    def test_subscription_rejects_both_policies_before_registering(self, graph):
        queue = Queue(graph, "Buffer")
        with pytest.raises(ConfigError):
            Subscription(
                graph,
                "Subscription",
                topic_arn=ARN,
                queue=queue,
                filter_policy={"a": ["b"]},
                filter_policy_with_message_body={"c": ["d"]},
            )
        assert graph.node.try_find_child("Subscription") is None

    def test_queue_policy_allows_topic(self, graph, destination):
        pipeline = PipelineComposer(graph).compose("Pipe1", _spec(destination=destination))
        deny_ssl, allow_sns = pipeline.buffer.policy.statements
        assert deny_ssl["Effect"] == "Deny"
        assert allow_sns["Action"] == "sqs:SendMessage"
        assert allow_sns["Principal"] == {"Service": "sns.amazonaws.com"}
        assert allow_sns["Condition"] == {"ArnEquals": {"aws:SourceArn": ARN}}


class TestComposeTarget:
    def test_default_transformation(self, graph, destination):
        pipeline = PipelineComposer(graph).compose("Pipe1", _spec(destination=destination))
        assert pipeline.pipe.input_template == TRANSFORM_SQS_BODY_SNS_RAW

    def test_caller_transformation(self, graph, destination):
        pipeline = PipelineComposer(graph).compose(
            "Pipe1",
            _spec(destination=destination, input_template=InputTransformation(TRANSFORM_SQS_BODY)),
        )
        assert pipeline.pipe.input_template == TRANSFORM_SQS_BODY

    def test_existing_target_verbatim(self, graph, destination):
        target = ApiDestinationTarget(destination)
        pipeline = PipelineComposer(graph).compose("Pipe1", _spec(destination=target))
        assert pipeline.target is target
        assert pipeline.pipe.input_template is None

    def test_role_permissions(self, graph, destination):
        pipeline = PipelineComposer(graph).compose("Pipe1", _spec(destination=destination))
        role = pipeline.pipe.role
        assert role.assumed_by == "pipes.amazonaws.com"
        read, invoke = role.statements
        assert "sqs:ReceiveMessage" in read["Action"]
        assert invoke["Action"] == "events:InvokeApiDestination"


class TestComposeDescription:
    def test_default_description(self, graph, destination):
        pipeline = PipelineComposer(graph).compose("Pipe1", _spec(destination=destination))
        assert isinstance(pipeline.description, Join)
        assert pipeline.description.parts[:3] == ("Forward messages from ", "my-topic", " to ")

    def test_default_description_with_unresolved_source(self, graph, destination):
        pipeline = PipelineComposer(graph).compose(
            "Pipe1", _spec(Pending("SourceSNSTopic"), destination=destination)
        )
        assert isinstance(pipeline.description.parts[1], Select)

    def test_explicit_description(self, graph, destination):
        pipeline = PipelineComposer(graph).compose(
            "Pipe1", _spec(destination=destination, description="custom")
        )
        assert pipeline.pipe.description == "custom"


class TestComposeStructure:
    def test_fresh_buffer_per_pipeline(self, graph, destination):
        composer = PipelineComposer(graph)
        first = composer.compose("Pipe1", _spec(destination=destination))
        second = composer.compose("Pipe2", _spec(destination=destination))
        assert first.buffer is not second.buffer
        assert first.buffer.logical_id != second.buffer.logical_id

    def test_buffer_suppression(self, graph, destination):
        pipeline = PipelineComposer(graph).compose("Pipe1", _spec(destination=destination))
        rules = pipeline.buffer.metadata["cdk_nag"]["rules_to_suppress"]
        assert [r["id"] for r in rules] == ["AwsSolutions-SQS3"]

    def test_duplicate_pipeline_id(self, graph, destination):
        composer = PipelineComposer(graph)
        composer.compose("Pipe1", _spec(destination=destination))
        with pytest.raises(ConstructError):
            composer.compose("Pipe1", _spec(destination=destination))

    def test_custom_scope(self, graph, destination):
        from alarm_relay.domain.models.construct import Construct

        group = Construct(graph, "Group")
        pipeline = PipelineComposer(graph).compose("Pipe1", _spec(destination=destination), scope=group)
        assert pipeline.node.path == "TestStack/Group/Pipe1"


class TestAddCondition:
    def test_condition_on_buffer_and_pipe_only(self, graph, destination):
        enabled = Parameter(graph, "Enabled")
        condition = Condition(graph, "IsEnabled", Condition.equals(enabled.value, "true"))
        composer = PipelineComposer(graph)
        pipeline = composer.compose("Pipe1", _spec(destination=destination))
        other = composer.compose("Pipe2", _spec(destination=destination))

        pipeline.add_condition(condition)

        assert pipeline.condition is condition
        conditioned = [r for r in graph.find_all() if isinstance(r, Resource) and r.condition is not None]
        assert conditioned == [pipeline.buffer, pipeline.pipe]
        assert other.buffer.condition is None
        assert pipeline.subscription.condition is None
        assert pipeline.buffer.policy.condition is None
