from datetime import datetime

from pydantic import BaseModel, Field

RESEND_MESSAGE = (
    "If an account exists and is not verified, a verification email has been sent."
)
FORGOT_MESSAGE = "If an account exists, a password reset email has been sent."


class MessageOut(BaseModel):
    message: str


class RegisteredOut(BaseModel):
    message: str
    user_id: str = Field(..., description="The id of the new user")
    email_failed: bool = False


class TokenOut(BaseModel):
    token: str


class MeOut(BaseModel):
    id: str
    email: str
    name: str | None = None
    email_verified: datetime | None = None


class CleanupPartOut(BaseModel):
    success: bool
    count: int


class CleanupOut(BaseModel):
    success: bool = True
    timestamp: datetime
    results: dict[str, CleanupPartOut]
