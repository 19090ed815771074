"""CSRF 가드 설정 모듈.

환경 변수를 통해 CSRF 가드 설정값을 관리합니다.
모든 환경 변수는 CSRF_ 접두사를 사용합니다.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CookieOptions(BaseModel):
    """CSRF 쿠키 속성.

    httponly는 항상 True, signed는 항상 False로 강제됩니다.
    그 외 속성은 그대로 Set-Cookie에 전달되며, 알 수 없는 속성은 설정 생성 시 거부됩니다.
    SameSite는 호출자가 지정하지 않으면 내보내지 않습니다.
    """

    path: str = "/"
    domain: str | None = None
    max_age: int | None = None
    expires: datetime | str | int | None = None
    secure: bool = False
    samesite: Literal["lax", "strict", "none"] | None = None
    partitioned: bool = False
    httponly: bool = True
    signed: bool = False

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def _force_attributes(cls, data: Any) -> Any:
        """호출자가 지정한 값과 관계없이 httponly/signed를 고정합니다."""
        if isinstance(data, dict):
            data = {**data, "httponly": True, "signed": False}
        return data

    def set_cookie_kwargs(self) -> dict[str, Any]:
        """Starlette Response.set_cookie()에 전달할 키워드 인자를 반환합니다.

        signed 속성은 Starlette 쿠키에 대응하는 개념이 없으므로 제외합니다.
        """
        return {
            "path": self.path,
            "domain": self.domain,
            "max_age": self.max_age,
            "expires": self.expires,
            "secure": self.secure,
            "httponly": self.httponly,
            "samesite": self.samesite,
            "partitioned": self.partitioned,
        }


class CsrfConfig(BaseSettings):
    """CSRF 가드 설정 클래스.

    생성 시점에 한 번 검증되며 이후에는 변경할 수 없습니다.

    Attributes:
        cookie_name: 실제 토큰을 담는 쿠키 이름 (기본값: csrf_token)
        header_name: 클라이언트가 토큰을 제출하는 헤더 이름 (기본값: X-CSRF-Token)
        cookie_options: 쿠키 속성
        disable_without_origin: Origin 헤더가 없는 요청은 검사를 생략할지 여부
        allowed_origins: 허용 Origin 목록. 미설정 시 Origin 필터링 없음
        signing_keys: 서명 키 목록. 설정 시 서명 방식으로 동작 (첫 번째 키로 서명)

    Example:
        >>> config = CsrfConfig(allowed_origins=["https://app.example.com"])
        >>> config.uses_origin_checks
        True
    """

    cookie_name: str = Field(default="csrf_token", min_length=1)
    header_name: str = Field(default="X-CSRF-Token", min_length=1)
    cookie_options: CookieOptions = Field(default_factory=CookieOptions)
    disable_without_origin: bool = False
    allowed_origins: list[str] | None = None
    signing_keys: list[str] | None = None

    model_config = SettingsConfigDict(
        env_prefix="CSRF_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    @field_validator("signing_keys")
    @classmethod
    def _validate_signing_keys(cls, keys: list[str] | None) -> list[str] | None:
        """서명 키 목록은 비어 있을 수 없고 빈 키를 포함할 수 없습니다."""
        if keys is None:
            return None
        if not keys:
            raise ValueError("signing_keys must contain at least one key when set")
        if any(not key for key in keys):
            raise ValueError("signing_keys must not contain empty keys")
        return keys

    @property
    def uses_origin_checks(self) -> bool:
        """Origin 관련 옵션이 하나라도 설정되었는지 여부."""
        return self.disable_without_origin or self.allowed_origins is not None

    @property
    def uses_signatures(self) -> bool:
        """서명 방식(레거시) 사용 여부."""
        return self.signing_keys is not None


class LogSettings(BaseSettings):
    """로깅 관련 설정."""

    env: str = Field(default="development", description="Environment (development/production)")
    app_name: str = "csrf-guard"

    model_config = SettingsConfigDict(
        env_prefix="CSRF_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


log_settings = LogSettings()
