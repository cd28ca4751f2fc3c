"""
alarm-relay 테스트 공용 fixture

- 고정 환경(us-east-1 / 123456789012)의 선언 그래프
- 리전/계정이 없는 그래프
- Google Chat 컨텍스트 예시
"""

import os

# 임포트 시 기본 로깅 설정을 건너뜁니다
os.environ.setdefault("ALARM_RELAY_SKIP_DEFAULT_LOGGING", "1")

import pytest

from alarm_relay.application.destination.google_chat import GoogleChatApiDestination
from alarm_relay.domain.models.construct import DeclarationGraph, Environment

REGION = "us-east-1"
ACCOUNT = "123456789012"
ENDPOINT = "https://chat.googleapis.com/v1/spaces/AAAA/messages?key=SECRETKEY&token=SECRETTOKEN"


@pytest.fixture
def env() -> Environment:
    return Environment(region=REGION, account=ACCOUNT)


@pytest.fixture
def graph(env: Environment) -> DeclarationGraph:
    return DeclarationGraph("TestStack", env=env)


@pytest.fixture
def agnostic_graph() -> DeclarationGraph:
    return DeclarationGraph("TestStack")


@pytest.fixture
def destination(graph: DeclarationGraph) -> GoogleChatApiDestination:
    return GoogleChatApiDestination(graph, "ApiDestination", space="Alerts", endpoint=ENDPOINT)


@pytest.fixture
def chat_context() -> dict:
    return {
        "SourceSNSTopic": "alerts",
        "GoogleChatConfig": {
            "MessageTitle": "ProjectA",
            "MessageIcon": "https://projecta.example.com/favicon.png",
            "Space": {
                "Label": "Ops",
                "Endpoint": ENDPOINT,
            },
        },
    }
