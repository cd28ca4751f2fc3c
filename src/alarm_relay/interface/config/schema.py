"""
컨텍스트 스키마 (Pydantic v2)

컨텍스트 파일(cdk.context.json 형태)을 검증하기 위한 스키마를 정의합니다.
알려진 키만 검증하고 나머지 키는 그대로 통과시킵니다.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Pydantic 모델은 Interface Layer에서만 외부 라이브러리에 의존합니다.


def _validate_endpoint(value: str | None) -> str | None:
    if value is not None and not value.startswith("https://"):
        raise ValueError("엔드포인트는 https:// 로 시작해야 합니다")
    return value


class SpaceSchema(BaseModel):
    """Google Chat 스페이스 스키마. 일부 키만 있어도 됩니다."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    label: str | None = Field(None, alias="Label", description="스페이스 라벨")
    endpoint: str | None = Field(None, alias="Endpoint", description="웹훅 URL (key, token 포함)")

    @field_validator("label")
    @classmethod
    def not_empty(cls, value: str | None) -> str | None:
        if value is not None and not value:
            raise ValueError("라벨은 비워둘 수 없습니다")
        return value

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, value: str | None) -> str | None:
        return _validate_endpoint(value)


class GoogleChatConfigSchema(BaseModel):
    """GoogleChatConfig 묶음 스키마."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    message_title: str | None = Field(None, alias="MessageTitle", description="메시지 제목")
    message_icon: str | None = Field(None, alias="MessageIcon", description="메시지 아이콘 URL")
    space: SpaceSchema | None = Field(None, alias="Space", description="스페이스 설정")


class ContextFile(BaseModel):
    """
    컨텍스트 파일 스키마

    중첩(GoogleChatConfig)과 평면(GoogleChatSpaceLabel 등) 표기를 모두 받습니다.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    google_chat_config: GoogleChatConfigSchema | None = Field(None, alias="GoogleChatConfig")
    source_sns_topic: str | None = Field(None, alias="SourceSNSTopic", description="소스 토픽 이름 또는 ARN")
    message_title: str | None = Field(None, alias="GoogleChatMessageTitle")
    message_icon: str | None = Field(None, alias="GoogleChatMessageIcon")
    space_label: str | None = Field(None, alias="GoogleChatSpaceLabel")
    space_endpoint: str | None = Field(None, alias="GoogleChatSpaceEndpoint")

    @field_validator("space_endpoint")
    @classmethod
    def validate_endpoint(cls, value: str | None) -> str | None:
        return _validate_endpoint(value)

    def to_context(self) -> dict[str, Any]:
        """지정된 값만 담은 컨텍스트 딕셔너리를 반환합니다."""
        return self.model_dump(by_alias=True, exclude_none=True)
