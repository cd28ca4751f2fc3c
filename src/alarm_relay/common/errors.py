"""
에러 처리 모듈

AlarmRelay 전체에서 사용하는 예외 클래스와 에러 코드를 정의합니다.
모든 예외는 RelayError를 상속받아 일관된 에러 처리가 가능합니다.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """
    에러 코드 열거형

    CLI 종료 코드와 매핑되어 명령행 진입점에서 사용됩니다.
    """

    # 참조 관련
    INVALID_REFERENCE_FORMAT = "INVALID_REFERENCE_FORMAT"   # 토픽 ARN/이름 형식 오류

    # 구성 트리 관련
    DUPLICATE_CONSTRUCT = "DUPLICATE_CONSTRUCT"             # 같은 스코프에 중복 ID

    # 설정 관련
    CONFIG_INVALID = "CONFIG_INVALID"           # 설정 검증 실패
    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"       # 설정 파일 없음
    CONFIG_PARSE_ERROR = "CONFIG_PARSE_ERROR"   # 설정 파싱 오류

    # 메시지 템플릿 관련
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"   # 템플릿 파일 없음
    UNKNOWN_STATE = "UNKNOWN_STATE"             # 알 수 없는 알람 상태

    # 합성 관련
    UNRESOLVED_REFERENCE = "UNRESOLVED_REFERENCE"   # 선언되지 않은 파라미터 참조
    SYNTH_FAILED = "SYNTH_FAILED"                   # 템플릿 합성 실패

    # 일반
    INTERNAL_ERROR = "INTERNAL_ERROR"           # 내부 오류


# 에러 코드 → CLI 종료 코드 매핑
_ERROR_CODE_TO_EXIT_CODE: dict[ErrorCode, int] = {
    ErrorCode.CONFIG_NOT_FOUND: 2,
    ErrorCode.CONFIG_PARSE_ERROR: 2,
    ErrorCode.CONFIG_INVALID: 2,

    ErrorCode.INVALID_REFERENCE_FORMAT: 3,
    ErrorCode.DUPLICATE_CONSTRUCT: 3,
    ErrorCode.UNKNOWN_STATE: 3,
    ErrorCode.TEMPLATE_NOT_FOUND: 3,

    ErrorCode.UNRESOLVED_REFERENCE: 4,
    ErrorCode.SYNTH_FAILED: 4,

    ErrorCode.INTERNAL_ERROR: 1,
}


def get_exit_code(error_code: ErrorCode) -> int:
    """
    에러 코드에 해당하는 CLI 종료 코드를 반환합니다.

    Args:
        error_code: 에러 코드

    Returns:
        종료 코드 (기본값: 1)
    """
    return _ERROR_CODE_TO_EXIT_CODE.get(error_code, 1)


class RelayError(Exception):
    """
    AlarmRelay 기본 예외 클래스

    모든 커스텀 예외의 부모 클래스입니다.
    에러 코드, 메시지, 상세 정보를 포함합니다.

    Attributes:
        code: 에러 코드 (ErrorCode)
        message: 사용자에게 표시할 메시지
        details: 추가 상세 정보 (디버깅용)
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    @property
    def exit_code(self) -> int:
        """CLI 종료 코드 반환"""
        return get_exit_code(self.code)

    def to_dict(self) -> dict[str, Any]:
        """
        예외 정보를 딕셔너리로 변환합니다.

        구조화 로그와 CLI 오류 출력에서 사용됩니다.
        """
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


class InvalidReferenceFormat(RelayError):
    """
    토픽 참조 형식 오류

    문자열이 정규 ARN 형식도, 토픽 이름 형식도 아닐 때 발생합니다.
    구성 도중 동기적으로 발생하는 유일한 검증 오류입니다.

    Attributes:
        reference: 문제가 된 참조 문자열
    """

    def __init__(
        self,
        reference: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.reference = reference
        _details: dict[str, Any] = {"reference": reference}
        if details:
            _details.update(details)
        super().__init__(
            ErrorCode.INVALID_REFERENCE_FORMAT,
            f"SNS 토픽 ARN 또는 토픽 이름 형식이 아닙니다: {reference}",
            _details,
        )


class ConstructError(RelayError):
    """
    구성 트리 관련 예외

    Attributes:
        path: 오류가 발생한 구성 경로
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        path: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.path = path
        _details: dict[str, Any] = {"path": path}
        if details:
            _details.update(details)
        super().__init__(code, message, _details)


class ConfigError(RelayError):
    """
    설정 관련 예외

    컨텍스트 파일의 로드, 파싱, 검증 중 발생하는 오류를 나타냅니다.

    Attributes:
        config_path: 오류가 발생한 설정 파일 경로 (선택)
        field_name: 오류가 발생한 필드 이름 (선택)
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        config_path: str | None = None,
        field_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.config_path = config_path
        self.field_name = field_name
        _details: dict[str, Any] = {}
        if config_path:
            _details["config_path"] = config_path
        if field_name:
            _details["field_name"] = field_name
        if details:
            _details.update(details)
        super().__init__(code, message, _details)


class TemplateError(RelayError):
    """
    메시지 템플릿 관련 예외

    Attributes:
        state: 요청된 알람 상태
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        state: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.state = state
        _details: dict[str, Any] = {"state": state}
        if details:
            _details.update(details)
        super().__init__(code, message, _details)


class SynthError(RelayError):
    """
    템플릿 합성 관련 예외

    Attributes:
        logical_id: 오류가 발생한 리소스 논리 ID (선택)
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        logical_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.logical_id = logical_id
        _details: dict[str, Any] = {}
        if logical_id:
            _details["logical_id"] = logical_id
        if details:
            _details.update(details)
        super().__init__(code, message, _details)
