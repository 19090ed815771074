"""CSRF 가드 데이터 모델 모듈.

요청 단위 검증 컨텍스트와 상태 머신의 최종 판정을 정의합니다.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from csrf_guard.exceptions import CsrfErrorKind

FETCH_SENTINEL = "fetch"


class SubmittedKind(StrEnum):
    """클라이언트가 비교 헤더로 제출한 값의 종류."""

    ABSENT = "absent"
    FETCH = "fetch"
    TOKEN = "token"


class GuardAction(StrEnum):
    """상태 머신의 종료 상태."""

    FORWARD = "forward"
    REJECT = "reject"


class GuardDecision(BaseModel):
    """요청에 대한 최종 판정.

    Attributes:
        action: 다음 핸들러 호출(FORWARD) 또는 거부(REJECT)
        kind: 거부 종류 (FORWARD인 경우 None)
        reason: 서버 로그에만 남기는 내부 사유
    """

    action: GuardAction
    kind: CsrfErrorKind | None = None
    reason: str | None = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def forward(cls) -> "GuardDecision":
        return cls(action=GuardAction.FORWARD)

    @classmethod
    def reject(cls, kind: CsrfErrorKind, reason: str) -> "GuardDecision":
        return cls(action=GuardAction.REJECT, kind=kind, reason=reason)

    @property
    def forwarded(self) -> bool:
        return self.action is GuardAction.FORWARD


class RequestVerificationContext(BaseModel):
    """요청 하나 동안만 유지되는 검증 컨텍스트.

    요청 간에 공유되지 않으며, 실제 토큰은 최초 필요 시점에 한 번만 해석됩니다.

    Attributes:
        method: 요청 메서드 (대문자)
        origin: Origin 헤더 값
        submitted_kind: 제출 헤더 값의 종류
        submitted_token: 디코딩된 제출 토큰 (submitted_kind가 TOKEN인 경우)
        real_token: 쿠키에서 읽었거나 새로 발급한 실제 토큰
        stored_signature: 쿠키에 저장된 서명 (서명 방식)
        regenerated: 이번 요청에서 토큰을 새로 발급했는지 여부
    """

    method: str
    origin: str | None = None
    submitted_kind: SubmittedKind = SubmittedKind.ABSENT
    submitted_token: bytes = b""
    real_token: bytes | None = None
    stored_signature: bytes = b""
    regenerated: bool = False

    @property
    def resolved(self) -> bool:
        return self.real_token is not None
