"""Authentication models and types."""

from collections.abc import Awaitable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from .exceptions import MissingCredentialsError


class AuthOutcome(Enum):
    """Terminal state of one authentication attempt."""

    SUCCESS = "success"
    FAIL = "fail"
    ERROR = "error"


@dataclass(frozen=True)
class Credentials:
    """Username and password extracted from an incoming request."""

    username: str
    password: str

    def __post_init__(self) -> None:
        if not self.username or not self.password:
            raise MissingCredentialsError()

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "Credentials":
        """Build credentials from a mapping holding username and password."""
        return cls(
            username=values.get("username") or "",
            password=values.get("password") or "",
        )

    def to_form(self, redirect_to: str) -> dict[str, str]:
        """Form body for the Domino login request."""
        return {
            "username": self.username,
            "password": self.password,
            "redirectTo": redirect_to,
        }


@dataclass(frozen=True)
class AuthResult:
    """Outcome reported for one authentication attempt."""

    outcome: AuthOutcome
    user: Any = None
    message: str | None = None
    status_code: int | None = None
    error: BaseException | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is AuthOutcome.SUCCESS

    @property
    def failed(self) -> bool:
        return self.outcome is AuthOutcome.FAIL

    @property
    def errored(self) -> bool:
        return self.outcome is AuthOutcome.ERROR


class CredentialExtractor(Protocol):
    """Extracts credentials from a request.

    May return ``Credentials``, a mapping with ``username``/``password``,
    ``None``, or an awaitable of any of these.
    """

    def __call__(self, request: Any) -> Any: ...


class IdentityVerifier(Protocol):
    """Resolves a SmartNSF identity to an application user.

    Returns the user (or an awaitable of it). Raising reports an error.
    """

    def __call__(self, identity: dict[str, Any]) -> Any: ...


class OutcomeHandler(Protocol):
    """Outcome channel of the host framework.

    Each method may be a plain function or a coroutine function.
    """

    def success(self, user: Any) -> Awaitable[None] | None: ...

    def fail(self, message: str, status_code: int) -> Awaitable[None] | None: ...

    def error(self, err: BaseException) -> Awaitable[None] | None: ...
