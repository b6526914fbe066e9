"""SmartNSF authentication strategy.

Delegates username/password authentication to a Domino server running the
SmartNSF REST extension and resolves the returned identity to an
application user.
"""

import inspect
from collections.abc import Callable, Mapping
from http.cookiejar import Cookie, CookieJar
from typing import Any
from urllib.parse import urlsplit

import httpx
import structlog

from .config import SmartNSFOptions
from .exceptions import (
    MissingCredentialsError,
    NoUserError,
    OutcomeAlreadyReportedError,
    SmartNSFConfigurationError,
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

logger = structlog.get_logger()

AUTHENTICATION_FAILED = "Authentication failed"


async def _resolve(value: Any) -> Any:
    """Await value if the callable handed back an awaitable."""
    if inspect.isawaitable(value):
        return await value
    return value


def _domain_matches(host: str, domain: str) -> bool:
    domain = domain.lstrip(".").lower()
    if host == domain or host.endswith(f".{domain}"):
        return True
    # http.cookiejar stores dotless hosts as "<host>.local"
    return f"{host}.local" == domain


def _path_matches(base_path: str, cookie_path: str) -> bool:
    if cookie_path in ("", "/"):
        return True
    return base_path == cookie_path or base_path.startswith(
        cookie_path.rstrip("/") + "/"
    )


def scoped_cookies(jar: CookieJar, base_url: str) -> list[dict[str, Any]]:
    """Return the cookies of ``jar`` that apply to ``base_url``, in jar order."""
    parts = urlsplit(base_url)
    host = (parts.hostname or "").lower()
    base_path = parts.path or "/"

    cookies: list[dict[str, Any]] = []
    cookie: Cookie
    for cookie in jar:
        if not _domain_matches(host, cookie.domain):
            continue
        if not _path_matches(base_path, cookie.path):
            continue
        cookies.append(
            {
                "name": cookie.name,
                "value": cookie.value,
                "domain": cookie.domain,
                "path": cookie.path,
                "secure": cookie.secure,
                "expires": cookie.expires,
            }
        )
    return cookies


class _OutcomeReporter:
    """Reports exactly one outcome of an authentication call."""

    def __init__(self, handler: OutcomeHandler | None):
        self.handler = handler
        self.result: AuthResult | None = None

    async def _report(
        self, result: AuthResult, notify: Callable[[OutcomeHandler], Any]
    ) -> AuthResult:
        if self.result is not None:
            raise OutcomeAlreadyReportedError(
                f"Outcome {self.result.outcome.value} already reported, "
                f"refusing {result.outcome.value}"
            )
        self.result = result

        if self.handler is not None:
            await _resolve(notify(self.handler))
        return result

    async def success(self, user: Any) -> AuthResult:
        return await self._report(
            AuthResult(outcome=AuthOutcome.SUCCESS, user=user),
            lambda handler: handler.success(user),
        )

    async def fail(self, message: str, status_code: int) -> AuthResult:
        return await self._report(
            AuthResult(
                outcome=AuthOutcome.FAIL, message=message, status_code=status_code
            ),
            lambda handler: handler.fail(message, status_code),
        )

    async def error(self, err: BaseException) -> AuthResult:
        return await self._report(
            AuthResult(outcome=AuthOutcome.ERROR, message=str(err), error=err),
            lambda handler: handler.error(err),
        )


class SmartNSFStrategy:
    """Authentication strategy delegating credentials to Domino and SmartNSF.

    The extractor pulls username and password out of the request, the
    strategy posts them to ``{remote_host}/names.nsf?login`` and follows the
    redirect to the SmartNSF login endpoint of ``login_path_root``. The JSON
    identity it answers with looks like::

        {
            "username": "Hans Muster/ACME",
            "email": "hans.muster@acme.com",
            "roles": ["[dbmanager]", "[signer]"],
            "groups": ["*", "_ServerAccess"],
            "accesslevel": 3,
            "cookies": [{"name": "LtpaToken", "value": "token", ...}],
        }

    ``cookies`` is added by the strategy and holds the session cookies the
    Domino server issued. The identity is handed to ``verify``, which returns
    the application user (or raises).

    Example:

        async def verify(identity):
            return await users.find_one(username=identity["username"])

        strategy = SmartNSFStrategy(
            {"remote_host": "https://example.org", "login_path_root": "/apps/app.nsf"},
            verify,
            form_extractor,
        )
        result = await strategy.authenticate(request)
    """

    name = "smartnsf"

    def __init__(
        self,
        options: SmartNSFOptions | Mapping[str, Any] | None,
        verify: IdentityVerifier | None,
        extractor: CredentialExtractor | None,
    ):
        """Initialize the strategy.

        Args:
            options: SmartNSFOptions or a mapping with remote host and login path
            verify: Resolves the SmartNSF identity to an application user
            extractor: Extracts credentials from the request

        Raises:
            SmartNSFConfigurationError: If any of verify, extractor,
                login_path_root or remote_host is missing
        """
        if isinstance(options, Mapping):
            options = SmartNSFOptions.from_mapping(options)

        if (
            not verify
            or not extractor
            or not (options and options.login_path_root)
            or not (options and options.remote_host)
        ):
            raise SmartNSFConfigurationError(
                "SmartNSF authentication strategy requires a verify, extractor, "
                "options.login_path_root and options.remote_host to work correctly"
            )

        self.options = options
        self._verify = verify
        self._extractor = extractor

    async def authenticate(
        self, request: Any, handler: OutcomeHandler | None = None
    ) -> AuthResult:
        """Authenticate a request against the Domino server.

        Exactly one of ``handler.success``, ``handler.fail`` or
        ``handler.error`` is called; the same outcome is returned.

        Args:
            request: Host framework request, only passed to the extractor
            handler: Optional outcome channel of the host framework

        Returns:
            AuthResult describing the outcome
        """
        reporter = _OutcomeReporter(handler)

        try:
            credentials = await self._extract(request)
        except MissingCredentialsError as e:
            logger.warning("SmartNSF credentials missing from request")
            return await reporter.error(e)
        except Exception as e:
            logger.error(
                "SmartNSF credential extractor failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return await reporter.error(e)

        form = credentials.to_form(self.options.redirect_to)

        # ssl.SSLError (bad CA file) is an OSError, InvalidURL is no HTTPError
        try:
            async with httpx.AsyncClient(
                timeout=self.options.timeout_seconds,
                verify=self.options.get_ssl_verify_config(),
                follow_redirects=True,
            ) as client:
                response = await client.post(self.options.login_url, data=form)
                cookies = scoped_cookies(client.cookies.jar, self.options.remote_host)
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as e:
            logger.error(
                "SmartNSF login request failed",
                url=self.options.login_url,
                error=str(e),
                error_type=type(e).__name__,
            )
            return await reporter.error(e)

        if response.status_code != 200:
            logger.error(
                "SmartNSF login returned unexpected status",
                status=response.status_code,
                username=credentials.username,
            )
            return await reporter.error(SmartNSFRequestError(response.status_code))

        identity = self._parse_identity(response)
        if identity is None:
            logger.warning(
                "SmartNSF authentication failed", username=credentials.username
            )
            return await reporter.fail(AUTHENTICATION_FAILED, 401)

        identity["cookies"] = cookies

        try:
            user = await _resolve(self._verify(identity))
        except Exception as e:
            logger.error(
                "SmartNSF verify callback failed",
                username=identity["username"],
                error=str(e),
                error_type=type(e).__name__,
            )
            return await reporter.error(e)

        if not user:
            logger.warning(
                "SmartNSF verify callback resolved no user",
                username=identity["username"],
            )
            return await reporter.error(NoUserError())

        logger.info(
            "SmartNSF authentication successful",
            username=identity["username"],
            cookies_count=len(cookies),
        )
        return await reporter.success(user)

    async def _extract(self, request: Any) -> Credentials:
        """Run the extractor and coerce its result to Credentials."""
        extracted = await _resolve(self._extractor(request))

        if isinstance(extracted, Credentials):
            return extracted
        if isinstance(extracted, Mapping):
            return Credentials.from_mapping(extracted)
        raise MissingCredentialsError()

    def _parse_identity(self, response: httpx.Response) -> dict[str, Any] | None:
        """Parse the SmartNSF identity, None if the login was rejected."""
        try:
            identity = response.json()
        except ValueError as e:
            logger.debug(
                "SmartNSF response is not valid JSON",
                error=str(e),
                response=response.text[:200],
            )
            return None

        if not isinstance(identity, dict) or not identity.get("username"):
            logger.debug("SmartNSF response carries no username")
            return None

        return identity
