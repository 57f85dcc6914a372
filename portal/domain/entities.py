from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class TokenType(str, Enum):
    EMAIL_VERIFICATION = "EMAIL_VERIFICATION"
    PASSWORD_RESET = "PASSWORD_RESET"


@dataclass
class User:
    id: str | None = None
    email: str | None = None
    name: str | None = None
    email_verified: datetime | None = None
    is_active: bool = True

    def __post_init__(self):
        if self.email:
            self.email = self.email.strip().lower()
            if not self.email:
                raise ValueError("email cannot be empty")
        else:
            raise ValueError("email is required")

    @property
    def is_verified(self) -> bool:
        return self.email_verified is not None

    def verify_email(self, when: datetime) -> None:
        # first confirmation wins; later ones keep the original timestamp
        if self.email_verified is None:
            self.email_verified = when


@dataclass
class VerificationToken:
    identifier: str
    token: str
    type: TokenType
    expires: datetime
    id: str | None = None

    def is_expired(self, now: datetime) -> bool:
        """Expiry bound is exclusive: a token is dead at exactly `expires`."""
        return now >= self.expires
