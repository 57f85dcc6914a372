from pydantic import BaseModel, EmailStr, Field, field_validator

from portal.settings import get_settings

TOKEN_PATTERN = r"^[0-9a-f]{64}$"

# bcrypt only reads the first 72 bytes; longer passwords are refused rather
# than silently truncated
PASSWORD_MAX_BYTES = 72


def _check_password_length(value: str) -> str:
    min_length = get_settings().password_min_length
    if len(value) < min_length:
        raise ValueError(f"password must be at least {min_length} characters")
    if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"password must be at most {PASSWORD_MAX_BYTES} bytes")
    return value


class RegisterIn(BaseModel):
    name: str | None = Field(None, description="Display name", max_length=100)
    email: EmailStr = Field(..., description="The email of the user", max_length=255)
    password: str = Field(..., description="The password of the user")

    @field_validator("password")
    @classmethod
    def password_length(cls, value: str) -> str:
        return _check_password_length(value)


class EmailIn(BaseModel):
    email: EmailStr = Field(..., max_length=255)


class ResetPasswordIn(BaseModel):
    token: str = Field(..., pattern=TOKEN_PATTERN)
    password: str

    @field_validator("password")
    @classmethod
    def password_length(cls, value: str) -> str:
        return _check_password_length(value)
