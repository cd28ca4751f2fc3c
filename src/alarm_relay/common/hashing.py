"""
짧은 식별자 생성

긴 논리 이름(토픽 ARN, 구성 경로 등)에서 결정적인 짧은 식별자를 만듭니다.
플랫폼의 논리 ID 길이 제한을 넘는 이름을 대신할 때 사용합니다.
"""

from __future__ import annotations

import hashlib


def short_id(value: str, length: int = 4) -> str:
    """
    값의 SHAKE-256 다이제스트를 대문자 16진수로 반환합니다.

    Args:
        value: 해시할 문자열
        length: 다이제스트 바이트 수 (결과 길이는 2 * length)

    Returns:
        대문자 16진수 문자열

    Example:
        >>> len(short_id("arn:aws:sns:us-east-1:123456789012:alerts"))
        8
    """
    return hashlib.shake_256(value.encode("utf-8")).hexdigest(length).upper()
