"""
Google Chat 스페이스 웹훅 대상

Google Chat 웹훅은 인증 정보를 헤더가 아닌 URL 쿼리 파라미터(key, token)로 받습니다.
EventBridge는 모든 연결에 인증 방식을 요구하므로 사용되지 않는 더미 API 키를 넣고,
고정된 content-type 헤더를 설정합니다.
"""

from __future__ import annotations

from typing import Any

from alarm_relay.common.logging import get_logger
from alarm_relay.domain.models.construct import Construct
from alarm_relay.domain.models.resources import ApiDestination, Connection, HttpMethod
from alarm_relay.domain.models.values import Deferred, Pending, as_text

logger = get_logger(__name__)

CONTENT_TYPE_HEADER = "content-type"
CONTENT_TYPE_JSON = "application/json;charset=utf-8"

# 실제 인증은 URL에 포함되므로 사용되지 않는 값
DUMMY_API_KEY_NAME = "dummy"
DUMMY_API_KEY_VALUE = "key"


class GoogleChatWebhookConnection(Connection):
    """
    Google Chat 웹훅 연결

    스페이스 라벨이 배포 시점 값이면 구성 ID로 쓸 수 없으므로 "Connection"을 사용합니다.
    """

    def __init__(
        self,
        scope: Construct,
        id: str | Deferred,
        header_parameters: dict[str, str] | None = None,
        description: str | None = None,
    ) -> None:
        construct_id = "Connection" if isinstance(id, Pending) else as_text(id)
        super().__init__(
            scope,
            construct_id,
            api_key_name=DUMMY_API_KEY_NAME,
            api_key_value=DUMMY_API_KEY_VALUE,
            header_parameters={
                CONTENT_TYPE_HEADER: CONTENT_TYPE_JSON,
                **(header_parameters or {}),
            },
            description=description,
        )


class GoogleChatApiDestination(ApiDestination):
    """
    Google Chat 스페이스 API 대상

    HTTP 메서드는 POST로 고정됩니다. connection이 없으면 스페이스 라벨로
    GoogleChatWebhookConnection을 새로 만듭니다.

    Example:
        >>> destination = GoogleChatApiDestination(
        ...     graph,
        ...     "ApiDestination",
        ...     space="Alerts",
        ...     endpoint="https://chat.googleapis.com/v1/spaces/AAA/messages?key=K&token=T",
        ... )
    """

    def __init__(
        self,
        scope: Construct,
        id: str,
        space: str | Deferred,
        endpoint: str | Deferred,
        connection: Connection | None = None,
        description: Any = None,
    ) -> None:
        if connection is None:
            connection = GoogleChatWebhookConnection(scope, space)
        super().__init__(
            scope,
            id,
            connection=connection,
            endpoint=as_text(endpoint),
            http_method=HttpMethod.POST,
            description=description,
        )
        self.space = space

        logger.debug(
            f"Google Chat API 대상 선언: {self.node.path}",
            space=as_text(space),
            connection=connection.node.path,
        )
