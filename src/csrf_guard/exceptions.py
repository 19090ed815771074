"""CSRF 가드 예외 클래스 모듈.

토큰 코덱 계약 위반과 HTTP 수준의 CSRF 거부를 구분하여 정의합니다.
거부 예외는 대응하는 HTTP 상태 코드와 에러 코드에 매핑됩니다.
"""

from enum import StrEnum


class CsrfErrorKind(StrEnum):
    """CSRF 거부 종류."""

    BAD_ORIGIN = "bad_origin"
    BAD_CSRF_TOKEN = "bad_csrf_token"


class CsrfGuardError(Exception):
    """CSRF 가드 기본 예외 클래스.

    모든 CSRF 가드 예외의 부모 클래스입니다.

    Attributes:
        message: 오류 메시지
    """

    def __init__(self, message: str = "CSRF 가드 오류가 발생했습니다") -> None:
        self.message = message
        super().__init__(self.message)


class TokenCodecError(CsrfGuardError):
    """토큰 코덱 계약 위반 예외."""


class LengthMismatchError(TokenCodecError):
    """XOR 대상 버퍼의 길이가 서로 다른 경우 발생합니다.

    호출 측 프로그래밍 오류이며 사용자 입력으로 발생해서는 안 됩니다.
    """

    def __init__(self, data_length: int, key_length: int) -> None:
        self.data_length = data_length
        self.key_length = key_length
        super().__init__(
            f"버퍼 길이가 일치하지 않습니다 (data={data_length}, key={key_length})"
        )


class InvalidTokenLengthError(TokenCodecError):
    """마스킹/언마스킹 입력 토큰의 길이가 잘못된 경우 발생합니다."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"토큰 길이가 잘못되었습니다 (expected={expected}, actual={actual})")


class CsrfRejectedError(CsrfGuardError):
    """CSRF 검증 거부 예외.

    Attributes:
        message: 클라이언트에 노출되는 오류 메시지
        status_code: HTTP 상태 코드
        error_code: 응답 본문의 에러 코드
        kind: 거부 종류
    """

    def __init__(
        self,
        kind: CsrfErrorKind,
        error_code: str,
        message: str,
        status_code: int = 400,
    ) -> None:
        self.kind = kind
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class BadOriginError(CsrfRejectedError):
    """허용되지 않은 Origin에서 온 요청 (HTTP 400)."""

    def __init__(self, message: str = "허용되지 않은 Origin에서 요청했습니다") -> None:
        super().__init__(CsrfErrorKind.BAD_ORIGIN, "CSRF_001", message)


class BadCsrfTokenError(CsrfRejectedError):
    """쿠키의 CSRF 토큰과 헤더의 토큰이 일치하지 않는 요청 (HTTP 400).

    토큰 누락, 형식 오류, 재발급, 불일치를 모두 같은 예외로 표현하여
    어떤 검사가 실패했는지 외부에 드러내지 않습니다.
    """

    def __init__(self, message: str = "유효하지 않은 CSRF 토큰입니다") -> None:
        super().__init__(CsrfErrorKind.BAD_CSRF_TOKEN, "CSRF_002", message)


def rejection_for(kind: CsrfErrorKind) -> CsrfRejectedError:
    """거부 종류에 대응하는 예외 인스턴스를 생성합니다."""
    if kind is CsrfErrorKind.BAD_ORIGIN:
        return BadOriginError()
    return BadCsrfTokenError()
