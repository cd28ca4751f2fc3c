"""설정 해석 모듈"""

from alarm_relay.application.config.resolver import (
    ChatSettings,
    ConfigurationResolver,
    LogicalSetting,
    SettingDefinition,
    SettingSource,
    SpaceSettings,
)

__all__ = [
    "ChatSettings",
    "ConfigurationResolver",
    "LogicalSetting",
    "SettingDefinition",
    "SettingSource",
    "SpaceSettings",
]
