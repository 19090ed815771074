"""csrf-guard: Double Submit Cookie 방식의 CSRF 방어 라이브러리.

쿠키에 실제 토큰을, 응답 헤더에 마스킹(또는 서명)된 토큰을 싣고,
상태 변경 요청에서 두 값이 일치하는지 상수 시간으로 검증합니다.

주요 구성 요소:
    - CsrfMiddleware: FastAPI/Starlette CSRF 미들웨어
    - CsrfGuard: 프레임워크 독립적인 요청 검증 상태 머신
    - CsrfConfig: CSRF 가드 설정 관리
    - configure_logging: 토큰 값을 가리는 structlog 설정 (애플리케이션 시작 시 호출)
    - mask_token, unmask_token: 일회용 패드 토큰 마스킹
    - sign_token, verify_token_signature: 키 교체를 지원하는 HMAC 서명

Example:
    >>> from fastapi import FastAPI
    >>> from csrf_guard import CsrfConfig, CsrfMiddleware, configure_logging
    >>>
    >>> app = FastAPI()
    >>> config = CsrfConfig(allowed_origins=["https://app.example.com"])
    >>> configure_logging(config)
    >>> app.add_middleware(CsrfMiddleware, config=config)
"""

from csrf_guard.codec import generate_token, mask_token, one_time_pad, unmask_token
from csrf_guard.config import CookieOptions, CsrfConfig
from csrf_guard.exceptions import (
    BadCsrfTokenError,
    BadOriginError,
    CsrfErrorKind,
    CsrfRejectedError,
    InvalidTokenLengthError,
    LengthMismatchError,
)
from csrf_guard.guard import CsrfGuard, RequestExchange
from csrf_guard.logging import configure_logging
from csrf_guard.middleware import CsrfMiddleware
from csrf_guard.signing import sign_token, verify_token_signature

__all__ = [
    "CsrfMiddleware",
    "CsrfGuard",
    "RequestExchange",
    "CsrfConfig",
    "CookieOptions",
    "configure_logging",
    "generate_token",
    "one_time_pad",
    "mask_token",
    "unmask_token",
    "sign_token",
    "verify_token_signature",
    "CsrfErrorKind",
    "CsrfRejectedError",
    "BadOriginError",
    "BadCsrfTokenError",
    "InvalidTokenLengthError",
    "LengthMismatchError",
]
