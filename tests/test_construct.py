"""Tests for ``alarm_relay.domain.models.construct``."""

from __future__ import annotations

import pytest

from alarm_relay.common.errors import ConstructError, ErrorCode
from alarm_relay.common.hashing import short_id
from alarm_relay.domain.models.construct import (
    MAX_LOGICAL_ID_LENGTH,
    Construct,
    DeclarationGraph,
    Environment,
)
from alarm_relay.domain.models.resources import Queue
from alarm_relay.domain.models.values import Aws


class TestConstructTree:
    def test_path(self, graph):
        group = Construct(graph, "Group")
        queue = Queue(group, "Queue")
        assert queue.node.path == "TestStack/Group/Queue"
        assert queue.node.path_components == ["Group", "Queue"]
        assert queue.graph is graph

    def test_duplicate_id_raises(self, graph):
        Construct(graph, "Group")
        with pytest.raises(ConstructError) as exc:
            Construct(graph, "Group")
        assert exc.value.code == ErrorCode.DUPLICATE_CONSTRUCT

    def test_slash_replaced(self, graph):
        construct = Construct(graph, "a/b")
        assert construct.node.id == "a--b"

    def test_find_all_excludes_root(self, graph):
        group = Construct(graph, "Group")
        queue = Queue(group, "Queue")
        assert graph.find_all() == [group, queue, queue.policy]


class TestLogicalIds:
    def test_top_level_uses_id(self, graph):
        assert Queue(graph, "My-Queue").logical_id == "MyQueue"

    def test_nested_appends_path_hash(self, graph):
        queue = Queue(Construct(graph, "Pipe1"), "Queue")
        assert queue.logical_id == "Pipe1Queue" + short_id("Pipe1/Queue")

    def test_hidden_components_skipped(self, graph):
        queue = Queue(Construct(graph, "Pipe1"), "Resource")
        assert queue.logical_id == "Pipe1" + short_id("Pipe1/Resource")

    def test_stable(self, graph):
        queue = Queue(Construct(graph, "Pipe1"), "Queue")
        assert queue.logical_id == queue.logical_id

    def test_long_ids_clamped(self, graph):
        long_top = Queue(graph, "A" * 300)
        nested = Queue(Construct(graph, "B" * 200), "C" * 200)
        assert len(long_top.logical_id) <= MAX_LOGICAL_ID_LENGTH
        assert len(nested.logical_id) == MAX_LOGICAL_ID_LENGTH


class TestDeclarationGraph:
    def test_environment(self, graph):
        assert graph.region == "us-east-1"
        assert graph.account == "123456789012"

    def test_agnostic_environment(self, agnostic_graph):
        assert agnostic_graph.env.is_agnostic
        assert agnostic_graph.region == Aws.REGION
        assert agnostic_graph.account == Aws.ACCOUNT_ID

    def test_context_is_copied(self):
        graph = DeclarationGraph("S", env=Environment(), context={"Group": {"Label": "A"}})
        value = graph.try_get_context("Group")
        value["Label"] = "B"
        assert graph.try_get_context("Group") == {"Label": "A"}

    def test_missing_context(self, graph):
        assert graph.try_get_context("Missing") is None
