"""컨텍스트 설정 모듈"""

from alarm_relay.interface.config.loader import ContextLoader
from alarm_relay.interface.config.schema import ContextFile, GoogleChatConfigSchema, SpaceSchema

__all__ = [
    "ContextLoader",
    "ContextFile",
    "GoogleChatConfigSchema",
    "SpaceSchema",
]
