"""
토픽 참조 캐시

토픽 이름, 정규 ARN, 이미 해석된 핸들 등 서로 다른 표기를 정규 ARN으로 정리하고,
선언 그래프마다 ARN당 하나의 ImportedTopic만 존재하도록 캐시합니다.

캐시는 모듈 전역이 아니라 DeclarationGraph.topic_cache에 있으며 그래프의 락으로 보호됩니다.
"""

from __future__ import annotations

import re

from alarm_relay.common.errors import InvalidReferenceFormat
from alarm_relay.common.hashing import short_id
from alarm_relay.common.logging import get_logger
from alarm_relay.domain.models.construct import Construct
from alarm_relay.domain.models.reference import (
    Err,
    ImportedTopic,
    Ok,
    Resolved,
    TopicRef,
    TopicResult,
    as_reference,
)
from alarm_relay.domain.models.values import Aws, Pending, as_text

logger = get_logger(__name__)

# arn:<partition>:sns:<region>:<account>:<name>
TOPIC_ARN_PATTERN = re.compile(
    r"arn:aws(?:-cn|-us-gov)?:sns:[a-z]{2}(?:-gov)?-[a-z]{4,10}-\d:\d{12}:[a-zA-Z0-9_-]{3,256}"
)

# 토픽 이름만 주어진 경우
TOPIC_NAME_PATTERN = re.compile(r"[a-zA-Z0-9_-]{3,256}")


def is_topic_arn(value: str) -> bool:
    """정규 토픽 ARN 형식인지 확인합니다."""
    return TOPIC_ARN_PATTERN.fullmatch(value) is not None


def is_topic_name(value: str) -> bool:
    """토픽 이름 형식인지 확인합니다."""
    return TOPIC_NAME_PATTERN.fullmatch(value) is not None


def canonical_topic_arn(scope: Construct, ref: str, account_agnostic: bool = False) -> str:
    """
    토픽 참조 문자열을 정규 ARN으로 변환합니다.

    Args:
        scope: 리전/계정을 가져올 스코프
        ref: 토픽 이름 또는 ARN
        account_agnostic: True이면 리전/계정을 배포 시점 의사 파라미터로 둡니다

    Returns:
        정규 ARN (account_agnostic이면 "${AWS::Region}" 등의 조각 포함)

    Raises:
        InvalidReferenceFormat: ARN도 토픽 이름도 아닐 때
    """
    if is_topic_arn(ref):
        return ref

    if not is_topic_name(ref):
        raise InvalidReferenceFormat(ref)

    graph = scope.graph
    region = Aws.REGION if account_agnostic else graph.region
    account = Aws.ACCOUNT_ID if account_agnostic else graph.account
    return f"arn:aws:sns:{as_text(region)}:{as_text(account)}:{ref}"


def try_resolve_topic(
    scope: Construct,
    ref: TopicRef,
    account_agnostic: bool = False,
) -> TopicResult:
    """
    토픽 참조를 해석합니다. 실패 시 예외 대신 Err를 반환합니다.

    - 이미 해석된 핸들은 그대로 반환합니다 (새 선언 없음).
    - 같은 정규 ARN으로 귀결되는 요청은 그래프 안에서 항상 같은 핸들을 받습니다.
    """
    reference = as_reference(ref)
    if isinstance(reference, Resolved):
        return Ok(reference.handle)

    if isinstance(reference.value, Pending):
        # 지연 값은 정규화할 수 없습니다
        return Err(InvalidReferenceFormat(reference.value.fragment))

    try:
        arn = canonical_topic_arn(scope, reference.value, account_agnostic)
    except InvalidReferenceFormat as e:
        logger.warning(f"토픽 참조 형식 오류: {e.reference}", reference=e.reference)
        return Err(e)

    graph = scope.graph
    with graph.lock:
        existing = graph.topic_cache.get(arn)
        if existing is not None:
            logger.debug(f"토픽 참조 캐시 적중: {arn}", topic_arn=arn)
            return Ok(existing)

        # ARN은 논리 ID 길이 제한을 넘을 수 있으므로 짧은 식별자를 구성 ID로 사용합니다
        topic = ImportedTopic(graph, short_id(arn), arn, account_agnostic=account_agnostic)
        graph.topic_cache[arn] = topic

    logger.debug(
        f"토픽 참조 생성: {arn}",
        topic_arn=arn,
        construct_id=topic.node.id,
    )
    return Ok(topic)


def resolve_topic(
    scope: Construct,
    ref: TopicRef,
    account_agnostic: bool = False,
) -> ImportedTopic:
    """
    토픽 참조를 해석합니다.

    Args:
        scope: 참조를 해석할 스코프 (캐시는 스코프가 속한 그래프의 것을 사용)
        ref: 토픽 이름, ARN, Known 값 또는 ImportedTopic
        account_agnostic: 토픽 이름을 ARN으로 만들 때 리전/계정을 배포 시점에 결정할지 여부

    Returns:
        캐시된 ImportedTopic

    Raises:
        InvalidReferenceFormat: 참조 형식이 잘못되었을 때

    Example:
        >>> topic = resolve_topic(graph, "alerts")
        >>> topic is resolve_topic(graph, "arn:aws:sns:us-east-1:123456789012:alerts")
        True
    """
    return try_resolve_topic(scope, ref, account_agnostic).unwrap()
