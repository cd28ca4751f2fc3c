"""
설정 해석기

이름 있는 설정 값을 우선순위에 따라 해석합니다.

1. 같은 ID로 이미 만들어진 플레이스홀더(스택 파라미터)
2. 컨텍스트 저장소 (중첩 구조 값 → 평면 키 순서)
3. 새 플레이스홀더 생성 (배포 시점에 값을 받음)

해석은 항상 성공합니다. 값이 끝내 주어지지 않으면 배포 단계에서 실패하며
이 모듈은 그 실패를 다루지 않습니다.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from alarm_relay.common.logging import get_logger
from alarm_relay.domain.models.construct import DeclarationGraph
from alarm_relay.domain.models.resources import Parameter
from alarm_relay.domain.models.values import Deferred, Known, Pending

logger = get_logger(__name__)


class SettingSource(str, Enum):
    """설정 값의 출처"""

    EXPLICIT_CONTEXT = "explicit-context"                       # 컨텍스트에 명시된 값
    EXISTING_PLACEHOLDER = "existing-placeholder"               # 이미 있던 플레이스홀더
    NEWLY_CREATED_PLACEHOLDER = "newly-created-placeholder"     # 새로 만든 플레이스홀더


@dataclass(frozen=True)
class SettingDefinition:
    """
    설정 정의

    Attributes:
        id: 설정 ID (평면 컨텍스트 키이자 플레이스홀더 ID)
        description: 플레이스홀더 설명
        sensitive: 값을 출력/로그에 노출하지 않을지 여부
    """

    id: str
    description: str
    sensitive: bool = False


@dataclass(frozen=True)
class LogicalSetting:
    """
    해석된 설정

    Attributes:
        id: 설정 ID
        value: Known(컨텍스트 값) 또는 Pending(플레이스홀더)
        source: 값의 출처
        sensitive: 민감 값 여부
    """

    id: str
    value: Deferred
    source: SettingSource
    sensitive: bool = False

    @property
    def is_placeholder(self) -> bool:
        return isinstance(self.value, Pending)

    @property
    def display_value(self) -> str:
        """로그에 남겨도 되는 값"""
        if isinstance(self.value, Pending):
            return self.value.fragment
        if self.sensitive:
            return mask_secret_url(self.value.value)
        return self.value.value

    def __repr__(self) -> str:
        return (
            f"LogicalSetting(id={self.id!r}, value={self.display_value!r}, "
            f"source={self.source.value})"
        )


def mask_secret_url(url: str) -> str:
    """URL 쿼리 파라미터 값(key, token 등)을 마스킹합니다."""
    # https://host/path?key=abc&token=def
    # -> https://host/path?key=****&token=****
    return re.sub(r"([?&][^=&#]+=)[^&#]*", r"\1****", url)


# === Google Chat 설정 정의 ===

CHAT_CONFIG_CONTEXT_KEY = "GoogleChatConfig"

MESSAGE_TITLE = SettingDefinition(
    id="GoogleChatMessageTitle",
    description="The title used on the Google Chat message that is sent.",
)
MESSAGE_ICON = SettingDefinition(
    id="GoogleChatMessageIcon",
    description="The icon used on the Google Chat message that is sent.",
)
SPACE_LABEL = SettingDefinition(
    id="GoogleChatSpaceLabel",
    description='The label for the Google Chat space to send messages to (e.g. "Alerts").',
)
SPACE_ENDPOINT = SettingDefinition(
    id="GoogleChatSpaceEndpoint",
    description=(
        "The endpoint of the Google Chat space to send messages to that includes key and "
        "token query parameters (e.g. https://chat.googleapis.com/v1/spaces/SPACE/messages?key=KEY&token=TOKEN)."
    ),
    sensitive=True,
)
SOURCE_TOPIC = SettingDefinition(
    id="SourceSNSTopic",
    description="The name or ARN of the SNS topic that will be used as the source for the pipe.",
)


@dataclass(frozen=True)
class SpaceSettings:
    """Google Chat 스페이스 설정 (라벨 + 엔드포인트)"""

    label: LogicalSetting
    endpoint: LogicalSetting


@dataclass(frozen=True)
class ChatSettings:
    """
    Google Chat 설정

    중첩 컨텍스트, 평면 컨텍스트, 배포 파라미터 중 어디서 왔든 같은 구조로 해석됩니다.
    """

    message_title: LogicalSetting
    message_icon: LogicalSetting
    space: SpaceSettings


class ConfigurationResolver:
    """
    설정 해석기

    같은 그래프에 대해 같은 ID를 여러 번 해석해도 플레이스홀더는 하나만 만들어집니다.
    플레이스홀더는 그래프 루트의 자식으로 등록되므로 해석기 인스턴스가 달라도
    그래프 범위에서 멱등성이 유지됩니다.

    Example:
        >>> resolver = ConfigurationResolver(graph)
        >>> resolver.resolve_setting("GoogleChatMessageTitle")
        Pending(placeholder_id='GoogleChatMessageTitle')
        >>> chat = resolver.resolve_chat_settings()
        >>> chat.space.endpoint.sensitive
        True
    """

    def __init__(self, graph: DeclarationGraph) -> None:
        self._graph = graph
        self._chat_settings: ChatSettings | None = None

    def find_existing_placeholder(self, id: str) -> Parameter | None:
        """그래프에 같은 ID의 플레이스홀더가 있으면 반환합니다."""
        existing = self._graph.node.try_find_child(id)
        return existing if isinstance(existing, Parameter) else None

    def resolve(
        self,
        id: str,
        description: str | None = None,
        sensitive: bool = False,
        nested: Any = None,
    ) -> LogicalSetting:
        """
        설정을 해석합니다.

        Args:
            id: 설정 ID
            description: 새 플레이스홀더의 설명
            sensitive: 민감 값 여부 (플레이스홀더에 NoEcho 적용)
            nested: 중첩 구조 컨텍스트에서 찾은 값 (평면 키보다 먼저 사용)

        Returns:
            해석된 설정
        """
        with self._graph.lock:
            placeholder = self.find_existing_placeholder(id)
            if placeholder is not None:
                return LogicalSetting(
                    id, placeholder.value, SettingSource.EXISTING_PLACEHOLDER, sensitive
                )

            if nested is not None:
                return self._from_context(id, nested, sensitive)

            value = self._graph.try_get_context(id)
            if value:
                return self._from_context(id, value, sensitive)

            placeholder = Parameter(
                self._graph,
                id,
                description=description,
                no_echo=sensitive,
            )

        logger.info(
            f"플레이스홀더 생성: {id}",
            setting_id=id,
            no_echo=sensitive,
        )
        return LogicalSetting(
            id, placeholder.value, SettingSource.NEWLY_CREATED_PLACEHOLDER, sensitive
        )

    def resolve_definition(self, definition: SettingDefinition, nested: Any = None) -> LogicalSetting:
        """설정 정의로 해석합니다."""
        return self.resolve(
            definition.id,
            description=definition.description,
            sensitive=definition.sensitive,
            nested=nested,
        )

    def resolve_setting(self, id: str) -> Deferred:
        """설정 값을 해석합니다 (Known 또는 Pending)."""
        return self.resolve(id).value

    def resolve_group(
        self,
        group: dict[str, Any] | None,
        members: dict[str, SettingDefinition],
    ) -> dict[str, LogicalSetting]:
        """
        묶음 설정을 해석합니다.

        묶음이 없으면 모든 멤버를 평면 키/플레이스홀더로 해석하고,
        묶음이 있지만 일부 멤버가 없으면 없는 멤버만 보충합니다 (교체가 아닌 병합).

        Args:
            group: 중첩 컨텍스트의 묶음 객체 (예: {"Label": "A"})
            members: 묶음 키 → 설정 정의

        Returns:
            묶음 키 → 해석된 설정
        """
        group = group if isinstance(group, dict) else {}
        return {
            key: self.resolve_definition(definition, nested=group.get(key))
            for key, definition in members.items()
        }

    def resolve_chat_settings(self) -> ChatSettings:
        """
        Google Chat 설정을 해석합니다.

        컨텍스트 "GoogleChatConfig" 객체를 먼저 보고, 없는 값은 평면 키
        (GoogleChatMessageTitle 등)와 플레이스홀더로 보충합니다.
        결과는 해석기 인스턴스에 캐시됩니다.
        """
        if self._chat_settings is not None:
            return self._chat_settings

        config = self._graph.try_get_context(CHAT_CONFIG_CONTEXT_KEY)
        if not isinstance(config, dict):
            config = {}

        title = self.resolve_definition(MESSAGE_TITLE, nested=config.get("MessageTitle"))
        icon = self.resolve_definition(MESSAGE_ICON, nested=config.get("MessageIcon"))
        space = self.resolve_group(
            config.get("Space"),
            {"Label": SPACE_LABEL, "Endpoint": SPACE_ENDPOINT},
        )
        self._chat_settings = ChatSettings(
            message_title=title,
            message_icon=icon,
            space=SpaceSettings(label=space["Label"], endpoint=space["Endpoint"]),
        )

        logger.info(
            "Google Chat 설정 해석 완료",
            title=self._chat_settings.message_title.display_value,
            space_label=self._chat_settings.space.label.display_value,
            space_endpoint=self._chat_settings.space.endpoint.display_value,
        )
        return self._chat_settings

    def _from_context(self, id: str, value: Any, sensitive: bool) -> LogicalSetting:
        setting = LogicalSetting(id, Known(str(value)), SettingSource.EXPLICIT_CONTEXT, sensitive)
        logger.debug(f"컨텍스트 설정 사용: {id}", setting_id=id, value=setting.display_value)
        return setting
