class DomainError(Exception):
    """Base class for all domain-level errors."""

    pass


class InvalidCredentials(DomainError):
    """Email/password pair does not match an active account."""

    pass


class EmailNotVerified(DomainError):
    """Credentials are correct but the account email was never confirmed."""

    pass


class UserNotFound(DomainError):
    """No user matches the lookup criteria (e.g., email)."""

    pass


class UserAlreadyExists(DomainError):
    """An account with the given email already exists."""

    pass


class InvalidOrExpiredToken(DomainError):
    """
    Token is unknown, of the wrong type, or past its expiry.

    Callers must not tell these cases apart in responses; `reason` is kept
    for logs only.
    """

    def __init__(self, reason: str = "not_found") -> None:
        super().__init__(reason)
        self.reason = reason
