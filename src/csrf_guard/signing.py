"""HMAC 토큰 서명 모듈 (레거시 검증 방식).

서명 키 교체(key rotation)를 지원합니다. 새 토큰은 항상 첫 번째 키로
서명하고, 검증 시에는 설정된 모든 키를 순서대로 시도합니다.
"""

import hashlib
import hmac
from collections.abc import Sequence

SIGNATURE_LENGTH = hashlib.sha256().digest_size


def _signature(token: bytes, key: str) -> bytes:
    return hmac.new(key.encode("utf-8"), token, hashlib.sha256).digest()


def sign_token(token: bytes, key: str) -> bytes:
    """토큰에 HMAC-SHA256 서명을 붙입니다.

    Args:
        token: 실제 토큰
        key: 서명 키

    Returns:
        token || HMAC-SHA256(key, token)
    """
    return token + _signature(token, key)


def verify_token_signature(token: bytes, signature: bytes, keys: Sequence[str]) -> bool:
    """서명이 후보 키 중 하나로 생성되었는지 검증합니다.

    키는 순서대로 시도하며 첫 번째 일치에서 True를 반환합니다.
    각 비교는 상수 시간으로 수행됩니다.

    Args:
        token: 실제 토큰
        signature: 검증할 서명
        keys: 후보 서명 키 목록 (현재 키 + 이전 키)

    Returns:
        검증 성공 여부
    """
    for key in keys:
        if hmac.compare_digest(signature, _signature(token, key)):
            return True

    return False
