"""토픽 참조 모듈"""

from alarm_relay.application.reference.topics import (
    canonical_topic_arn,
    resolve_topic,
    try_resolve_topic,
)

__all__ = [
    "canonical_topic_arn",
    "resolve_topic",
    "try_resolve_topic",
]
