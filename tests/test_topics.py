"""Tests for ``alarm_relay.application.reference.topics``."""

from __future__ import annotations

import pytest

from alarm_relay.application.reference.topics import (
    canonical_topic_arn,
    is_topic_arn,
    is_topic_name,
    resolve_topic,
    try_resolve_topic,
)
from alarm_relay.common.errors import ErrorCode, InvalidReferenceFormat
from alarm_relay.common.hashing import short_id
from alarm_relay.domain.models.construct import DeclarationGraph
from alarm_relay.domain.models.reference import (
    Err,
    ImportedTopic,
    Ok,
    Raw,
    Resolved,
    as_reference,
)
from alarm_relay.domain.models.values import Known, Pending, Select

ARN = "arn:aws:sns:us-east-1:123456789012:my-topic"


class TestFormats:
    @pytest.mark.parametrize(
        "value",
        [
            ARN,
            "arn:aws-cn:sns:cn-north-1:123456789012:alerts",
            "arn:aws-us-gov:sns:us-gov-west-1:123456789012:alerts_1",
        ],
    )
    def test_valid_arns(self, value):
        assert is_topic_arn(value)

    @pytest.mark.parametrize(
        "value",
        [
            "arn:aws:sqs:us-east-1:123456789012:my-topic",
            "arn:aws:sns:us-east-1:1234:my-topic",
            "my-topic",
        ],
    )
    def test_invalid_arns(self, value):
        assert not is_topic_arn(value)

    def test_topic_names(self):
        assert is_topic_name("my-topic")
        assert is_topic_name("a_b")
        assert not is_topic_name("ab")
        assert not is_topic_name("!!!")
        assert not is_topic_name("a" * 257)


class TestCanonicalArn:
    def test_name_expanded_with_environment(self, graph):
        assert canonical_topic_arn(graph, "my-topic") == ARN

    def test_arn_unchanged(self, graph):
        assert canonical_topic_arn(graph, ARN) == ARN

    def test_account_agnostic(self, graph):
        assert (
            canonical_topic_arn(graph, "alerts", account_agnostic=True)
            == "arn:aws:sns:${AWS::Region}:${AWS::AccountId}:alerts"
        )

    def test_unset_environment(self, agnostic_graph):
        assert (
            canonical_topic_arn(agnostic_graph, "alerts")
            == "arn:aws:sns:${AWS::Region}:${AWS::AccountId}:alerts"
        )

    def test_malformed(self, graph):
        with pytest.raises(InvalidReferenceFormat) as exc:
            canonical_topic_arn(graph, "!!!")
        assert exc.value.reference == "!!!"
        assert exc.value.code == ErrorCode.INVALID_REFERENCE_FORMAT


class TestResolveTopic:
    def test_canonical_reference(self, graph):
        topic = resolve_topic(graph, "my-topic")
        assert topic.topic_arn == ARN
        assert topic.topic_name == "my-topic"

    def test_equivalent_spellings_share_handle(self, graph):
        by_name = resolve_topic(graph, "my-topic")
        assert resolve_topic(graph, ARN) is by_name
        assert resolve_topic(graph, Known("my-topic")) is by_name
        assert resolve_topic(graph, Raw(ARN)) is by_name
        assert resolve_topic(graph, by_name) is by_name
        assert resolve_topic(graph, Resolved(by_name)) is by_name

    def test_single_declaration_per_arn(self, graph):
        resolve_topic(graph, "my-topic")
        resolve_topic(graph, ARN)
        topics = [c for c in graph.find_all() if isinstance(c, ImportedTopic)]
        assert len(topics) == 1
        assert topics[0].node.id == short_id(ARN)
        assert graph.topic_cache == {ARN: topics[0]}

    def test_nested_scope_uses_graph_cache(self, graph):
        from alarm_relay.domain.models.construct import Construct

        nested = Construct(graph, "Group")
        assert resolve_topic(nested, "my-topic") is resolve_topic(graph, "my-topic")

    def test_graphs_are_isolated(self, graph, env):
        other = DeclarationGraph("Other", env=env)
        assert resolve_topic(graph, "my-topic") is not resolve_topic(other, "my-topic")

    def test_malformed_reference(self, graph):
        with pytest.raises(InvalidReferenceFormat):
            resolve_topic(graph, "!!!")
        assert graph.topic_cache == {}


class TestTryResolveTopic:
    def test_ok(self, graph):
        result = try_resolve_topic(graph, "my-topic")
        assert isinstance(result, Ok)
        assert result.unwrap().topic_arn == ARN

    def test_err(self, graph):
        result = try_resolve_topic(graph, "!!!")
        assert isinstance(result, Err)
        assert result.error.reference == "!!!"
        with pytest.raises(InvalidReferenceFormat):
            result.unwrap()

    def test_pending_is_err(self, graph):
        result = try_resolve_topic(graph, Pending("SourceSNSTopic"))
        assert isinstance(result, Err)
        assert result.error.reference == "${SourceSNSTopic}"


class TestReferenceVariant:
    def test_handle_is_resolved(self, graph):
        topic = resolve_topic(graph, "my-topic")
        assert as_reference(topic) == Resolved(topic)

    def test_string_is_raw(self):
        assert as_reference("my-topic") == Raw("my-topic")
        assert as_reference(Known("my-topic")) == Raw("my-topic")

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            as_reference(123)


class TestImportedTopic:
    def test_pending_arn_name_is_select(self, graph):
        topic = ImportedTopic(graph, "Source", Pending("SourceSNSTopic"))
        assert isinstance(topic.topic_name, Select)
        assert topic.topic_name.index == 5

    def test_agnostic_arn_keeps_name(self, graph):
        topic = resolve_topic(graph, "alerts", account_agnostic=True)
        assert topic.topic_name == "alerts"
        assert topic.account_agnostic is True

    def test_fifo_flag(self, graph):
        fifo = ImportedTopic(graph, "Fifo", "arn:aws:sns:us-east-1:123456789012:orders.fifo")
        assert fifo.fifo is True
        assert resolve_topic(graph, "my-topic").fifo is False
        assert ImportedTopic(graph, "Source", Pending("SourceSNSTopic")).fifo is False
