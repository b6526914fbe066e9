"""Configuration for the SmartNSF authentication strategy."""

import os
import ssl
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
import yaml

from .exceptions import SmartNSFConfigurationError

logger = structlog.get_logger()

# Accepted option names, including the camelCase names of the Node.js strategy
_OPTION_ALIASES = {
    "login_path_root": ("login_path_root", "loginPathRoot", "smartNSFPath"),
    "remote_host": ("remote_host", "remoteHost", "smartNSFHost"),
    "timeout_seconds": ("timeout_seconds", "timeoutSeconds"),
    "ca_cert_path": ("ca_cert_path", "caCertPath"),
    "ssl_verify": ("ssl_verify", "sslVerify"),
}


@dataclass(frozen=True)
class SmartNSFOptions:
    """Static configuration of a SmartNSF strategy.

    Attributes:
        login_path_root: Path of the SmartNSF enabled database, e.g. /apps/app.nsf
        remote_host: Domino base address including protocol, e.g. https://example.org
        timeout_seconds: Timeout handed to the HTTP client
        ca_cert_path: Custom CA bundle for TLS verification
        ssl_verify: Set to False to disable TLS verification (development only)
    """

    login_path_root: str
    remote_host: str
    timeout_seconds: float = 10.0
    ca_cert_path: str | None = None
    ssl_verify: bool = True

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "SmartNSFOptions":
        """Build options from a mapping, accepting snake and camel case keys."""
        kwargs: dict[str, Any] = {}
        for field_name, aliases in _OPTION_ALIASES.items():
            for alias in aliases:
                if values.get(alias) is not None:
                    kwargs[field_name] = values[alias]
                    break

        return cls(
            login_path_root=kwargs.pop("login_path_root", ""),
            remote_host=kwargs.pop("remote_host", ""),
            **kwargs,
        )

    @property
    def login_url(self) -> str:
        """Domino login form URL."""
        return f"{self.remote_host.rstrip('/')}/names.nsf?login"

    @property
    def redirect_to(self) -> str:
        """Redirect target handing the login over to the SmartNSF REST endpoint."""
        return f"{self.login_path_root}/xsp/.xrest/?login"

    def get_ssl_verify_config(self) -> ssl.SSLContext | bool:
        """Get the httpx ``verify`` setting.

        Returns:
            - SSLContext: Built from the custom CA certificate file (if it exists)
            - False: Verification disabled (insecure, for development only)
            - True: System CA bundle

        Raises:
            ssl.SSLError: If the CA certificate file holds no valid certificate
        """
        if self.ca_cert_path and Path(self.ca_cert_path).exists():
            return ssl.create_default_context(cafile=self.ca_cert_path)

        if self.ca_cert_path:
            logger.warning(
                "CA certificate path does not exist, using system CA store",
                path=self.ca_cert_path,
            )

        if not self.ssl_verify:
            logger.warning(
                "SSL certificate verification disabled - this is insecure and should only be used for development"
            )
            return False

        return True


class ConfigLoader:
    """Loads SmartNSF options from a YAML file and the environment.

    The YAML file holds a ``smartnsf`` section::

        smartnsf:
          remote_host: https://example.org
          login_path_root: /apps/app.nsf

    Environment variables take precedence over the file.
    """

    def __init__(self, config_file: str | None = None):
        self.config_file = Path(config_file) if config_file else None

    def load(self) -> SmartNSFOptions:
        """Load and validate options."""
        values = self._load_yaml_file()
        values.update(self._load_environment())

        options = SmartNSFOptions.from_mapping(values)
        if not options.remote_host or not options.login_path_root:
            raise SmartNSFConfigurationError(
                "SMARTNSF_HOST and SMARTNSF_PATH must be configured"
            )

        logger.info(
            "SmartNSF options loaded",
            remote_host=options.remote_host,
            login_path_root=options.login_path_root,
            timeout_seconds=options.timeout_seconds,
        )
        return options

    def _load_yaml_file(self) -> dict[str, Any]:
        """Read the smartnsf section of the YAML file, if any."""
        if self.config_file is None:
            return {}

        if not self.config_file.exists():
            logger.warning("Config file does not exist", file=str(self.config_file))
            return {}

        try:
            with open(self.config_file) as f:
                content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SmartNSFConfigurationError(
                f"Invalid config file {self.config_file}: {e}"
            ) from e

        if not content or not isinstance(content.get("smartnsf"), dict):
            return {}

        return dict(content["smartnsf"])

    def _load_environment(self) -> dict[str, Any]:
        """Read options from SMARTNSF_* environment variables."""
        values: dict[str, Any] = {}

        if os.getenv("SMARTNSF_HOST"):
            values["remote_host"] = os.environ["SMARTNSF_HOST"]
        if os.getenv("SMARTNSF_PATH"):
            values["login_path_root"] = os.environ["SMARTNSF_PATH"]
        if os.getenv("SMARTNSF_CA_CERT_PATH"):
            values["ca_cert_path"] = os.environ["SMARTNSF_CA_CERT_PATH"]

        timeout = os.getenv("SMARTNSF_TIMEOUT_SECONDS")
        if timeout:
            try:
                values["timeout_seconds"] = float(timeout)
            except ValueError as e:
                raise SmartNSFConfigurationError(
                    f"SMARTNSF_TIMEOUT_SECONDS must be a number, got {timeout!r}"
                ) from e

        ssl_verify = os.getenv("SMARTNSF_SSL_VERIFY")
        if ssl_verify:
            values["ssl_verify"] = ssl_verify.lower() != "false"

        return values


def get_options() -> SmartNSFOptions:
    """Load options from SMARTNSF_CONFIG_PATH and the environment."""
    return ConfigLoader(os.getenv("SMARTNSF_CONFIG_PATH")).load()
