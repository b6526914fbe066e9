"""Exceptions raised and reported by the SmartNSF authentication strategy."""


class SmartNSFError(Exception):
    """Base exception for SmartNSF authentication errors."""

    pass


class SmartNSFConfigurationError(SmartNSFError, ValueError):
    """Raised when the strategy or its options are misconfigured."""

    pass


class MissingCredentialsError(SmartNSFError):
    """Raised when the extractor does not provide username and password."""

    def __init__(
        self, message: str = "Expect username && password as part of credentials!"
    ):
        super().__init__(message)


class SmartNSFRequestError(SmartNSFError):
    """Raised when the Domino login call answers with a non-200 status."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"{status_code}: call to SmartNSF failed.")


class NoUserError(SmartNSFError):
    """Raised when the verify callable resolves no application user."""

    def __init__(self, message: str = "No user defined!"):
        super().__init__(message)


class OutcomeAlreadyReportedError(SmartNSFError):
    """Raised when a second outcome is reported for one authentication."""

    pass
