"""SmartNSF authentication strategy.

Delegates username/password logins to a Domino server with the SmartNSF
REST extension.
"""

from .config import ConfigLoader, SmartNSFOptions, get_options
from .exceptions import (
    MissingCredentialsError,
    NoUserError,
    OutcomeAlreadyReportedError,
    SmartNSFConfigurationError,
    SmartNSFError,
    SmartNSFRequestError,
)
from .models import (
    AuthOutcome,
    AuthResult,
    CredentialExtractor,
    Credentials,
    IdentityVerifier,
    OutcomeHandler,
)
from .logging import configure_logging
from .strategy import SmartNSFStrategy

__all__ = [
    "AuthOutcome",
    "AuthResult",
    "ConfigLoader",
    "CredentialExtractor",
    "Credentials",
    "IdentityVerifier",
    "MissingCredentialsError",
    "NoUserError",
    "OutcomeAlreadyReportedError",
    "OutcomeHandler",
    "SmartNSFConfigurationError",
    "SmartNSFError",
    "SmartNSFOptions",
    "SmartNSFRequestError",
    "SmartNSFStrategy",
    "configure_logging",
    "get_options",
]
