"""
Partner client configuration from environment variables and YAML.

Each partner gets its own PartnerConfig. Values are read from a YAML file
(optional) and overridden by environment variables using the partner name as
prefix, e.g. for partner ``thinkco``:

    THINKCO_URL, THINKCO_AUTH_MODE, THINKCO_CLIENT_ID, THINKCO_CLIENT_SECRET,
    THINKCO_USERNAME, THINKCO_PASSWORD, THINKCO_AUTH_PATH,
    THINKCO_TIMEOUT_SECONDS, THINKCO_MAX_CONCURRENT

The bypass flag (USE_MOCK_CLIENTS) is read from the environment on every
request so tests can toggle it between calls.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from partner_client.common.exceptions import ConfigurationError

MOCK_CLIENTS_ENV = "USE_MOCK_CLIENTS"
CONFIG_PATH_ENV = "PARTNER_CLIENT_CONFIG"
DEFAULT_CONFIG_PATH = Path("config.yaml")
DEFAULT_AUTH_PATH = "/auth"

_TRUE_VALUES = ("1", "true", "yes", "on")


def env_flag(name: str, default: bool = False) -> bool:
    """Read a boolean environment variable."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUE_VALUES


def mock_clients_enabled() -> bool:
    """Current value of the process-wide bypass flag."""
    return env_flag(MOCK_CLIENTS_ENV)


class AuthMode(str, Enum):
    """How a partner's requests are authenticated."""

    BEARER_EXCHANGE = "bearer_exchange"
    STATIC_BASIC = "static_basic"
    NONE = "none"


@dataclass(frozen=True)
class ExchangeCredentials:
    """The four values sent to a partner's credential exchange endpoint."""

    client_id: str
    client_secret: str = field(repr=False)
    username: str
    password: str = field(repr=False)


@dataclass
class PartnerConfig:
    """Connection and authentication settings for one partner API.

    Load from environment using PartnerConfig.from_env(name), or from a YAML
    file with load_partner_configs().
    """

    name: str
    url: str
    auth_mode: AuthMode = AuthMode.BEARER_EXCHANGE

    # Exchange credentials (bearer_exchange) / Basic credentials (static_basic)
    client_id: str = ""
    client_secret: str = field(default="", repr=False)
    username: str = ""
    password: str = field(default="", repr=False)

    auth_path: str = DEFAULT_AUTH_PATH

    # Transport
    timeout_seconds: float = 30
    max_concurrent: int = 20

    def __post_init__(self) -> None:
        if not isinstance(self.auth_mode, AuthMode):
            try:
                self.auth_mode = AuthMode(str(self.auth_mode).lower())
            except ValueError as e:
                raise ConfigurationError(
                    f"Unknown auth_mode '{self.auth_mode}' for partner '{self.name}'",
                    cause=e,
                ) from e
        if not self.auth_path.startswith("/"):
            self.auth_path = f"/{self.auth_path}"

    @property
    def exchange_credentials(self) -> ExchangeCredentials:
        return ExchangeCredentials(
            client_id=self.client_id,
            client_secret=self.client_secret,
            username=self.username,
            password=self.password,
        )

    def validate(self) -> None:
        """
        Check required settings for the configured auth mode.

        Raises:
            ConfigurationError: If a required value is missing
        """
        missing = []
        if not self.url:
            missing.append("url")

        if self.auth_mode == AuthMode.BEARER_EXCHANGE:
            for attr in ("client_id", "client_secret", "username", "password"):
                if not getattr(self, attr):
                    missing.append(attr)
        elif self.auth_mode == AuthMode.STATIC_BASIC:
            for attr in ("username", "password"):
                if not getattr(self, attr):
                    missing.append(attr)

        if missing:
            raise ConfigurationError(
                f"Partner '{self.name}' is missing required settings: "
                f"{', '.join(missing)}",
                context={"partner": self.name, "auth_mode": self.auth_mode.value},
            )

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> "PartnerConfig":
        """Build config from a mapping (e.g. one YAML partner section)."""
        known = {
            "url",
            "auth_mode",
            "client_id",
            "client_secret",
            "username",
            "password",
            "auth_path",
            "timeout_seconds",
            "max_concurrent",
        }
        kwargs = {k: v for k, v in (data or {}).items() if k in known}
        if "url" not in kwargs:
            kwargs["url"] = ""
        return cls(name=name, **kwargs)

    @classmethod
    def from_env(
        cls,
        name: str,
        prefix: Optional[str] = None,
        defaults: Optional[Dict[str, Any]] = None,
    ) -> "PartnerConfig":
        """Load partner configuration from environment variables.

        Args:
            name: Partner name
            prefix: Environment variable prefix (default: upper-cased name)
            defaults: Base values that environment variables override

        Raises:
            ConfigurationError: If a numeric setting cannot be parsed
        """
        prefix = (prefix or name).upper()
        values: Dict[str, Any] = dict(defaults or {})

        for key in (
            "url",
            "auth_mode",
            "client_id",
            "client_secret",
            "username",
            "password",
            "auth_path",
        ):
            env_value = os.getenv(f"{prefix}_{key.upper()}")
            if env_value is not None:
                values[key] = env_value

        try:
            timeout = os.getenv(f"{prefix}_TIMEOUT_SECONDS")
            if timeout is not None:
                values["timeout_seconds"] = float(timeout)
            max_concurrent = os.getenv(f"{prefix}_MAX_CONCURRENT")
            if max_concurrent is not None:
                values["max_concurrent"] = int(max_concurrent)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid numeric setting for partner '{name}': {e}", cause=e
            ) from e

        return cls.from_dict(name, values)


def load_partner_configs(
    path: Optional[Path] = None,
    apply_env: bool = True,
) -> Dict[str, PartnerConfig]:
    """
    Load all partner configurations from a YAML file.

    Expected structure:
        partners:
          thinkco:
            url: https://api.thinkco.example
            auth_mode: bearer_exchange
            client_id: ...
          trackm8:
            url: https://api.trackm8.example
            auth_mode: static_basic

    Args:
        path: YAML file (default: $PARTNER_CLIENT_CONFIG or ./config.yaml)
        apply_env: Overlay per-partner environment variables

    Returns:
        Dict of partner name to validated PartnerConfig

    Raises:
        ConfigurationError: If the file is missing, malformed, or a partner
            is missing required settings
    """
    if path is None:
        path = Path(os.getenv(CONFIG_PATH_ENV, str(DEFAULT_CONFIG_PATH)))
    path = Path(path)

    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}", cause=e) from e

    partners = raw.get("partners") if isinstance(raw, dict) else None
    if not isinstance(partners, dict) or not partners:
        raise ConfigurationError(f"No 'partners' section in {path}")

    configs: Dict[str, PartnerConfig] = {}
    for name, section in partners.items():
        if apply_env:
            config = PartnerConfig.from_env(name, defaults=section or {})
        else:
            config = PartnerConfig.from_dict(name, section or {})
        config.validate()
        configs[name] = config

    return configs


__all__ = [
    "AuthMode",
    "ExchangeCredentials",
    "PartnerConfig",
    "env_flag",
    "mock_clients_enabled",
    "load_partner_configs",
    "MOCK_CLIENTS_ENV",
    "DEFAULT_AUTH_PATH",
]
