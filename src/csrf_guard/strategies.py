"""토큰 검증 방식 모듈.

배포 단위로 하나의 방식만 사용합니다 (혼용 금지).

- MaskingStrategy: 쿠키에는 실제 토큰을, 헤더에는 매 응답마다 새로 마스킹한
  토큰을 싣습니다. 전송 토큰의 사이드 채널 내성을 얻는 대신 서명 키 교체는 없습니다.
- SignatureStrategy: 쿠키와 헤더 모두 HMAC 서명된 토큰을 싣습니다. 서명 키
  교체를 지원하는 대신 헤더 값이 응답마다 동일하여 BREACH 내성은 없습니다.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from csrf_guard.codec import MASKED_TOKEN_LENGTH, TOKEN_LENGTH, mask_token, tokens_equal, verify_masked_token
from csrf_guard.config import CsrfConfig
from csrf_guard.exceptions import TokenCodecError
from csrf_guard.signing import SIGNATURE_LENGTH, sign_token, verify_token_signature


class TokenStrategy(ABC):
    """토큰 검증 방식의 공통 인터페이스."""

    name: str = "base"
    #: 쿠키 값이 유효하려면 필요한 최소 바이트 수
    stored_length: int = TOKEN_LENGTH
    #: 클라이언트가 제출해야 하는 바이트 수
    submitted_length: int = MASKED_TOKEN_LENGTH

    def split_cookie(self, raw: bytes) -> tuple[bytes, bytes]:
        """쿠키 바이트열을 (실제 토큰, 저장된 서명)으로 나눕니다."""
        return raw[:TOKEN_LENGTH], raw[TOKEN_LENGTH:]

    def accepts_cookie(self, token: bytes, stored_signature: bytes) -> bool:
        """쿠키에서 읽은 토큰을 실제 토큰으로 사용할 수 있는지 여부."""
        return len(token) == TOKEN_LENGTH

    @abstractmethod
    def cookie_value(self, token: bytes) -> bytes:
        """쿠키에 저장할 바이트열을 반환합니다."""

    @abstractmethod
    def issue(self, token: bytes) -> bytes:
        """응답 헤더로 내보낼 바이트열을 반환합니다. 원본 토큰을 그대로 내보내지 않습니다."""

    @abstractmethod
    def verify(self, real_token: bytes, stored_signature: bytes, submitted: bytes) -> bool:
        """제출된 값이 실제 토큰과 일치하는지 검증합니다."""


class MaskingStrategy(TokenStrategy):
    """일회용 패드 마스킹 방식 (기본)."""

    name = "masking"
    stored_length = TOKEN_LENGTH
    submitted_length = MASKED_TOKEN_LENGTH

    def cookie_value(self, token: bytes) -> bytes:
        return token

    def issue(self, token: bytes) -> bytes:
        return mask_token(token)

    def verify(self, real_token: bytes, stored_signature: bytes, submitted: bytes) -> bool:
        try:
            return verify_masked_token(real_token, submitted)
        except TokenCodecError:
            return False


class SignatureStrategy(TokenStrategy):
    """HMAC 서명 방식 (레거시).

    Args:
        keys: 서명 키 목록. 첫 번째 키로 서명하고 모든 키로 검증합니다.
    """

    name = "signature"
    stored_length = TOKEN_LENGTH + SIGNATURE_LENGTH
    submitted_length = TOKEN_LENGTH + SIGNATURE_LENGTH

    def __init__(self, keys: Sequence[str]) -> None:
        if not keys:
            raise ValueError("SignatureStrategy requires at least one signing key")
        self.keys = tuple(keys)

    def accepts_cookie(self, token: bytes, stored_signature: bytes) -> bool:
        # 목록에서 제거된 키로 서명된 쿠키는 재발급 대상
        return (
            len(token) == TOKEN_LENGTH
            and len(stored_signature) == SIGNATURE_LENGTH
            and verify_token_signature(token, stored_signature, self.keys)
        )

    def cookie_value(self, token: bytes) -> bytes:
        return sign_token(token, self.keys[0])

    def issue(self, token: bytes) -> bytes:
        return sign_token(token, self.keys[0])

    def verify(self, real_token: bytes, stored_signature: bytes, submitted: bytes) -> bool:
        if len(submitted) != self.submitted_length or len(stored_signature) != SIGNATURE_LENGTH:
            return False

        sent_token, sent_signature = submitted[:TOKEN_LENGTH], submitted[TOKEN_LENGTH:]
        # 세 검사는 앞선 결과와 무관하게 모두 수행한다
        token_matches = tokens_equal(real_token, sent_token)
        stored_valid = verify_token_signature(real_token, stored_signature, self.keys)
        sent_valid = verify_token_signature(real_token, sent_signature, self.keys)
        return token_matches and stored_valid and sent_valid


def strategy_for(config: CsrfConfig) -> TokenStrategy:
    """설정에 맞는 검증 방식을 생성합니다."""
    if config.uses_signatures and config.signing_keys:
        return SignatureStrategy(config.signing_keys)
    return MaskingStrategy()
