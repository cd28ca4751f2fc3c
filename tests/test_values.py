"""Tests for ``alarm_relay.domain.models.values``."""

from __future__ import annotations

from alarm_relay.domain.models.construct import DeclarationGraph
from alarm_relay.domain.models.resources import Queue
from alarm_relay.domain.models.values import (
    Aws,
    Join,
    Known,
    Pending,
    Ref,
    as_text,
    concat,
    is_unresolved,
)


class TestDeferred:
    def test_pending_fragment(self):
        assert Pending("GoogleChatSpaceLabel").fragment == "${GoogleChatSpaceLabel}"

    def test_as_text(self):
        assert as_text(Known("a")) == "a"
        assert as_text(Pending("X")) == "${X}"
        assert as_text("plain") == "plain"

    def test_pseudo_parameters(self):
        assert as_text(Aws.REGION) == "${AWS::Region}"
        assert "AWS::AccountId" in Aws.NAMES


class TestIsUnresolved:
    def test_pending(self):
        assert is_unresolved(Pending("X"))

    def test_known(self):
        assert not is_unresolved(Known("${X}"))

    def test_string_with_fragment(self):
        assert is_unresolved("arn:aws:sns:${AWS::Region}:1:topic")

    def test_plain_string(self):
        assert not is_unresolved("alerts")

    def test_intrinsic(self):
        graph = DeclarationGraph("S")
        assert is_unresolved(Queue(graph, "Q").ref)


class TestConcat:
    def test_strings_only(self):
        assert concat("a", Known("b"), Pending("C")) == "ab${C}"

    def test_with_intrinsic(self):
        graph = DeclarationGraph("S")
        ref = Queue(graph, "Q").ref
        result = concat("to ", ref)
        assert isinstance(result, Join)
        assert result.parts == ("to ", ref)
        assert isinstance(result.parts[1], Ref)
