"""
메시지 템플릿 모듈

알람 상태별 Google Chat 카드 템플릿을 제공합니다.
"""

from alarm_relay.application.message.engine import (
    AlarmState,
    MessageTemplateEngine,
    PayloadTemplate,
    get_template,
)

__all__ = [
    "AlarmState",
    "MessageTemplateEngine",
    "PayloadTemplate",
    "get_template",
]
