"""CSRF 요청 검증 상태 머신 모듈.

요청마다 다음 순서로 판정합니다.

1. Vary 선언 (Cookie, Origin 옵션 사용 시 Origin)
2. Origin 검사 (Origin 옵션 사용 시)
3. 제출 헤더 해석, "fetch" 요청이면 현재 토큰을 응답 헤더로 발급
4. 안전한 메서드(GET/HEAD/OPTIONS/TRACE)는 통과
5. 토큰을 새로 발급한 요청은 거부
6. 제출 토큰 검증, 실패 시 거부

거부 시에는 항상 새로 마스킹(또는 서명)한 토큰을 응답 헤더에 실어
클라이언트가 재시도할 수 있게 합니다.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeVar

from csrf_guard.codec import decode_token, encode_token, generate_token
from csrf_guard.config import CookieOptions, CsrfConfig
from csrf_guard.exceptions import CsrfErrorKind, rejection_for
from csrf_guard.logging import CsrfEventLogger, csrf_event_logger
from csrf_guard.models import (
    FETCH_SENTINEL,
    GuardDecision,
    RequestVerificationContext,
    SubmittedKind,
)
from csrf_guard.strategies import TokenStrategy, strategy_for

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})

T = TypeVar("T")


class RequestExchange(Protocol):
    """가드가 호스트 프레임워크에 요구하는 요청/응답 기능."""

    @property
    def method(self) -> str: ...

    def get_header(self, name: str) -> str | None: ...

    def get_cookie(self, name: str) -> str | None: ...

    def add_vary(self, field: str) -> None: ...

    def set_header(self, name: str, value: str) -> None: ...

    def set_cookie(self, name: str, value: str, options: CookieOptions) -> None: ...


class CsrfGuard:
    """Double Submit Cookie 방식의 CSRF 가드.

    설정은 생성 시점에 고정되며, 요청 간 공유되는 가변 상태가 없으므로
    여러 요청에서 동시에 사용할 수 있습니다.

    Args:
        config: CSRF 가드 설정 (None이면 기본값/환경 변수 사용)
        event_logger: 보안 이벤트 로거

    Example:
        >>> guard = CsrfGuard(CsrfConfig(allowed_origins=["https://app.example.com"]))
        >>> decision = guard.evaluate(exchange)
        >>> decision.forwarded
        True
    """

    def __init__(
        self,
        config: CsrfConfig | None = None,
        event_logger: CsrfEventLogger | None = None,
    ) -> None:
        self.config = config or CsrfConfig()
        self.strategy: TokenStrategy = strategy_for(self.config)
        self._events = event_logger or csrf_event_logger

    def evaluate(self, exchange: RequestExchange) -> GuardDecision:
        """요청을 판정하고 필요한 응답 부수 효과(Vary, 헤더, 쿠키)를 기록합니다.

        Args:
            exchange: 요청/응답 기능 인터페이스

        Returns:
            FORWARD 또는 REJECT 판정
        """
        config = self.config

        if config.uses_origin_checks:
            exchange.add_vary("Origin")
        exchange.add_vary("Cookie")

        method = exchange.method.upper()
        origin = exchange.get_header("Origin") or None

        if origin is None and config.disable_without_origin:
            return GuardDecision.forward()

        if config.allowed_origins is not None and origin not in config.allowed_origins:
            self._events.log_origin_rejected(method, origin)
            return GuardDecision.reject(CsrfErrorKind.BAD_ORIGIN, "origin_not_allowed")

        context = RequestVerificationContext(method=method, origin=origin)
        self._read_submitted(exchange, context)

        if context.submitted_kind is SubmittedKind.FETCH:
            self._resolve_token(exchange, context)
            self._issue(exchange, context)
            self._events.log_token_issued(method)

        if method in SAFE_METHODS:
            return GuardDecision.forward()

        self._resolve_token(exchange, context)

        if context.regenerated:
            return self._reject_token(exchange, context, "regenerated")

        if context.submitted_kind is not SubmittedKind.TOKEN:
            return self._reject_token(exchange, context, f"submitted_{context.submitted_kind}")

        if len(context.submitted_token) != self.strategy.submitted_length:
            return self._reject_token(exchange, context, "malformed")

        if not self.strategy.verify(
            context.real_token or b"",
            context.stored_signature,
            context.submitted_token,
        ):
            return self._reject_token(exchange, context, "mismatch")

        return GuardDecision.forward()

    async def handle(self, exchange: RequestExchange, call_next: Callable[[], Awaitable[T]]) -> T:
        """요청을 판정하여 다음 핸들러를 호출하거나 거부 예외를 발생시킵니다.

        Raises:
            BadOriginError: 허용되지 않은 Origin
            BadCsrfTokenError: 토큰 누락, 형식 오류, 재발급, 불일치
        """
        decision = self.evaluate(exchange)
        if not decision.forwarded:
            raise rejection_for(decision.kind or CsrfErrorKind.BAD_CSRF_TOKEN)

        return await call_next()

    def _read_submitted(self, exchange: RequestExchange, context: RequestVerificationContext) -> None:
        sent = exchange.get_header(self.config.header_name)

        if not sent:
            context.submitted_kind = SubmittedKind.ABSENT
        elif sent == FETCH_SENTINEL:
            context.submitted_kind = SubmittedKind.FETCH
        else:
            context.submitted_kind = SubmittedKind.TOKEN
            context.submitted_token = decode_token(sent)

    def _resolve_token(self, exchange: RequestExchange, context: RequestVerificationContext) -> None:
        """쿠키에서 실제 토큰을 읽습니다. 누락/손상 시 새로 발급하여 쿠키에 씁니다.

        요청당 한 번만 해석합니다.
        """
        if context.resolved:
            return

        raw = decode_token(exchange.get_cookie(self.config.cookie_name))
        token, stored_signature = self.strategy.split_cookie(raw)

        if len(raw) >= self.strategy.stored_length and self.strategy.accepts_cookie(token, stored_signature):
            context.real_token = token
            context.stored_signature = stored_signature
            return

        token = generate_token()
        cookie_value = self.strategy.cookie_value(token)
        exchange.set_cookie(self.config.cookie_name, encode_token(cookie_value), self.config.cookie_options)

        context.real_token = token
        context.stored_signature = cookie_value[len(token):]
        context.regenerated = True
        self._events.log_token_regenerated(context.method, self.strategy.name)

    def _issue(self, exchange: RequestExchange, context: RequestVerificationContext) -> None:
        exchange.set_header(self.config.header_name, encode_token(self.strategy.issue(context.real_token or b"")))

    def _reject_token(
        self,
        exchange: RequestExchange,
        context: RequestVerificationContext,
        reason: str,
    ) -> GuardDecision:
        self._issue(exchange, context)
        self._events.log_token_rejected(context.method, context.origin, reason)
        return GuardDecision.reject(CsrfErrorKind.BAD_CSRF_TOKEN, reason)
