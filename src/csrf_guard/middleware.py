"""CSRF 미들웨어 모듈.

FastAPI/Starlette 애플리케이션에 Double Submit Cookie 방식의 CSRF 방어를
추가합니다. 가드가 기록한 응답 부수 효과는 다음 핸들러의 응답이나
거부 응답에 동일하게 적용됩니다.
"""

from typing import Any

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from csrf_guard.config import CookieOptions, CsrfConfig
from csrf_guard.exceptions import CsrfErrorKind, CsrfRejectedError, rejection_for
from csrf_guard.guard import CsrfGuard


class StarletteExchange:
    """Starlette Request 위에서 동작하는 RequestExchange 구현.

    응답 객체는 판정 이후에 생성되므로 부수 효과를 모아 두었다가
    apply()에서 한 번에 적용합니다.
    """

    def __init__(self, request: Request) -> None:
        self.request = request
        self.vary: list[str] = []
        self.headers: dict[str, str] = {}
        self.cookies: dict[str, tuple[str, CookieOptions]] = {}

    @property
    def method(self) -> str:
        return self.request.method

    def get_header(self, name: str) -> str | None:
        return self.request.headers.get(name)

    def get_cookie(self, name: str) -> str | None:
        return self.request.cookies.get(name)

    def add_vary(self, field: str) -> None:
        if field not in self.vary:
            self.vary.append(field)

    def set_header(self, name: str, value: str) -> None:
        self.headers[name] = value

    def set_cookie(self, name: str, value: str, options: CookieOptions) -> None:
        self.cookies[name] = (value, options)

    def apply(self, response: Response) -> Response:
        """기록된 Vary, 헤더, 쿠키를 응답에 적용합니다."""
        for field in self.vary:
            response.headers.add_vary_header(field)

        for name, value in self.headers.items():
            response.headers[name] = value

        for name, (value, options) in self.cookies.items():
            response.set_cookie(name, value, **options.set_cookie_kwargs())

        return response


def rejection_response(error: CsrfRejectedError) -> JSONResponse:
    """거부 예외를 JSON 오류 응답으로 변환합니다."""
    return JSONResponse(
        status_code=error.status_code,
        content={
            "error_code": error.error_code,
            "message": error.message,
        },
    )


class CsrfMiddleware(BaseHTTPMiddleware):
    """CSRF 검증 미들웨어.

    Args:
        app: FastAPI 애플리케이션 인스턴스
        config: CSRF 가드 설정 (None이면 환경 변수에서 로드)

    Example:
        >>> from fastapi import FastAPI
        >>> from csrf_guard import CsrfConfig, CsrfMiddleware, configure_logging
        >>>
        >>> app = FastAPI()
        >>> config = CsrfConfig()
        >>> configure_logging(config)
        >>> app.add_middleware(CsrfMiddleware, config=config)
    """

    def __init__(self, app: Any, config: CsrfConfig | None = None) -> None:
        super().__init__(app)
        self.guard = CsrfGuard(config)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """판정 결과에 따라 다음 핸들러를 호출하거나 400 응답을 반환합니다.

        Args:
            request: FastAPI 요청 객체
            call_next: 다음 미들웨어/핸들러 호출 함수

        Returns:
            HTTP 응답 객체
        """
        exchange = StarletteExchange(request)
        decision = self.guard.evaluate(exchange)

        if decision.forwarded:
            response = await call_next(request)
        else:
            response = rejection_response(rejection_for(decision.kind or CsrfErrorKind.BAD_CSRF_TOKEN))

        return exchange.apply(response)
