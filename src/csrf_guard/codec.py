"""CSRF 토큰 코덱 모듈.

토큰 생성, 일회용 패드(one-time pad) 마스킹, base64 전송 인코딩을 담당합니다.
마스킹된 토큰은 응답마다 무작위로 달라지므로 압축 오라클(BREACH) 공격으로
헤더에 실린 토큰을 복원할 수 없습니다.
"""

import base64
import binascii
import hmac
import secrets

from csrf_guard.exceptions import InvalidTokenLengthError, LengthMismatchError

TOKEN_LENGTH = 32
MASKED_TOKEN_LENGTH = TOKEN_LENGTH * 2


def generate_token() -> bytes:
    """CSRF 토큰 생성

    Returns:
        32바이트의 안전한 랜덤 토큰
    """
    return secrets.token_bytes(TOKEN_LENGTH)


def one_time_pad(data: bytearray | memoryview, key: bytes | bytearray | memoryview) -> None:
    """data를 key로 제자리(in place) XOR 합니다.

    두 버퍼의 길이가 다르면 어떤 바이트도 변경하기 전에 실패합니다.

    Raises:
        LengthMismatchError: 두 버퍼의 길이가 다른 경우
    """
    length = len(data)
    if length != len(key):
        raise LengthMismatchError(length, len(key))

    for i in range(length):
        data[i] ^= key[i]


def mask_token(token: bytes) -> bytes:
    """토큰을 새 랜덤 마스크로 마스킹합니다.

    Args:
        token: 32바이트 실제 토큰

    Returns:
        (token XOR mask) || mask 형식의 64바이트

    Raises:
        InvalidTokenLengthError: 토큰이 32바이트가 아닌 경우
    """
    if len(token) != TOKEN_LENGTH:
        raise InvalidTokenLengthError(TOKEN_LENGTH, len(token))

    mask = secrets.token_bytes(TOKEN_LENGTH)
    result = bytearray(MASKED_TOKEN_LENGTH)
    result[:TOKEN_LENGTH] = token
    result[TOKEN_LENGTH:] = mask

    with memoryview(result) as view:
        one_time_pad(view[:TOKEN_LENGTH], mask)

    return bytes(result)


def unmask_token(masked: bytes) -> bytes:
    """마스킹된 토큰에서 실제 토큰을 복원합니다.

    Raises:
        InvalidTokenLengthError: 입력이 64바이트가 아닌 경우
    """
    if len(masked) != MASKED_TOKEN_LENGTH:
        raise InvalidTokenLengthError(MASKED_TOKEN_LENGTH, len(masked))

    buffer = bytearray(masked)
    with memoryview(buffer) as view:
        one_time_pad(view[:TOKEN_LENGTH], view[TOKEN_LENGTH:])

    return bytes(buffer[:TOKEN_LENGTH])


def tokens_equal(real_token: bytes, sent_token: bytes) -> bool:
    """두 토큰을 상수 시간으로 비교합니다. 양쪽 모두 32바이트여야 합니다."""
    return (
        len(real_token) == TOKEN_LENGTH
        and len(sent_token) == TOKEN_LENGTH
        and hmac.compare_digest(real_token, sent_token)
    )


def verify_masked_token(real_token: bytes, sent_token: bytes) -> bool:
    """클라이언트가 제출한 마스킹 토큰이 실제 토큰과 일치하는지 검증합니다."""
    if len(real_token) == TOKEN_LENGTH and len(sent_token) == MASKED_TOKEN_LENGTH:
        return tokens_equal(real_token, unmask_token(sent_token))

    return False


def encode_token(data: bytes) -> str:
    """바이트 토큰을 전송용 base64 문자열로 인코딩합니다."""
    return base64.b64encode(data).decode("ascii")


def decode_token(value: str | None) -> bytes:
    """전송된 base64 문자열을 디코딩합니다.

    값이 없거나 디코딩할 수 없으면 빈 바이트열을 반환하여
    호출 측에서 누락/손상된 토큰으로 취급하게 합니다.
    """
    if not value:
        return b""

    try:
        return base64.b64decode(value.encode("ascii"))
    except (binascii.Error, UnicodeEncodeError):
        return b""
