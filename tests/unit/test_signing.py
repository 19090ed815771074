"""HMAC 토큰 서명 단위 테스트."""

import hashlib
import hmac

from csrf_guard.codec import TOKEN_LENGTH
from csrf_guard.signing import SIGNATURE_LENGTH, sign_token, verify_token_signature


class TestSignToken:
    """토큰 서명 테스트"""

    def test_signed_token_layout(self, real_token: bytes):
        """token || HMAC-SHA256(key, token)"""
        signed = sign_token(real_token, "primary-key")

        assert len(signed) == TOKEN_LENGTH + SIGNATURE_LENGTH
        assert signed[:TOKEN_LENGTH] == real_token
        assert signed[TOKEN_LENGTH:] == hmac.new(b"primary-key", real_token, hashlib.sha256).digest()

    def test_signature_is_deterministic(self, real_token: bytes):
        assert sign_token(real_token, "k") == sign_token(real_token, "k")

    def test_different_keys_produce_different_signatures(self, real_token: bytes):
        assert sign_token(real_token, "k1") != sign_token(real_token, "k2")


class TestVerifyTokenSignature:
    """서명 검증 및 키 교체 테스트"""

    def test_valid_with_primary_key(self, real_token: bytes):
        signature = sign_token(real_token, "current")[TOKEN_LENGTH:]

        assert verify_token_signature(real_token, signature, ["current", "previous"]) is True

    def test_valid_with_previous_key(self, real_token: bytes):
        """교체 전 키로 서명된 토큰도 목록에 남아 있으면 유효"""
        signature = sign_token(real_token, "previous")[TOKEN_LENGTH:]

        assert verify_token_signature(real_token, signature, ["current", "previous"]) is True

    def test_invalid_with_unlisted_key(self, real_token: bytes):
        signature = sign_token(real_token, "retired")[TOKEN_LENGTH:]

        assert verify_token_signature(real_token, signature, ["current", "previous"]) is False

    def test_invalid_for_other_token(self, real_token: bytes):
        signature = sign_token(real_token, "current")[TOKEN_LENGTH:]

        assert verify_token_signature(b"x" * TOKEN_LENGTH, signature, ["current"]) is False

    def test_empty_key_list(self, real_token: bytes):
        signature = sign_token(real_token, "current")[TOKEN_LENGTH:]

        assert verify_token_signature(real_token, signature, []) is False

    def test_truncated_signature(self, real_token: bytes):
        signature = sign_token(real_token, "current")[TOKEN_LENGTH:]

        assert verify_token_signature(real_token, signature[:16], ["current"]) is False
