"""웹훅 대상 모듈"""

from alarm_relay.application.destination.google_chat import (
    GoogleChatApiDestination,
    GoogleChatWebhookConnection,
)

__all__ = [
    "GoogleChatApiDestination",
    "GoogleChatWebhookConnection",
]
