"""
Domain Layer

선언 그래프와 리소스 엔티티를 정의합니다.
외부 라이브러리에 의존하지 않으며, 표준 라이브러리만 사용합니다.

구성 요소:
- models: 선언 그래프, 지연 값, 리소스, 토픽 참조, 파이프라인 입력
"""

from alarm_relay.domain.models import (
    DeclarationGraph,
    Environment,
    ImportedTopic,
    Known,
    Pending,
    PipelineInput,
)

__all__ = [
    "DeclarationGraph",
    "Environment",
    "ImportedTopic",
    "Known",
    "Pending",
    "PipelineInput",
]
