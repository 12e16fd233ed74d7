"""Connection settings for the scheduler service.

Settings are resolved from a profile in an INI file (`~/.cronopscfg` by
default), then overridden by `CRONOPS_*` environment variables. The host
URL is normalized here so the HTTP layer always receives a clean base URL.
"""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_HOST = "http://localhost:8081"
DEFAULT_PROFILE = "DEFAULT"

_CONFIG_FILE_ENV = "CRONOPS_CONFIG_FILE"
_HOST_ENV = "CRONOPS_HOST"
_TOKEN_ENV = "CRONOPS_TOKEN"
_COOKIE_ENV = "CRONOPS_COOKIE"
_TIMEOUT_ENV = "CRONOPS_TIMEOUT"


class ConfigError(RuntimeError):
    """Raised when the connection settings are unusable."""


@dataclass(frozen=True)
class ConsoleConfig:
    """
    Resolved connection settings.

    Attributes:
        host: Scheduler service base URL, without trailing slash.
        profile: Name of the profile the settings came from.
        token: Optional bearer token sent with every request.
        cookies: Cookies sent with every request (session credentials).
        timeout: Request timeout in seconds; None keeps the transport default.
    """

    host: str = DEFAULT_HOST
    profile: str = DEFAULT_PROFILE
    token: str | None = None
    cookies: dict[str, str] = field(default_factory=dict)
    timeout: float | None = None


def _sanitize_host(host: str | None) -> str | None:
    """
    Normalize a scheduler host URL.

    - Removes query strings (e.g. '?debug=1')
    - Removes trailing slashes
    """
    if not host:
        return host
    host = host.strip().split("?", 1)[0]
    return host.rstrip("/")


def _parse_cookies(raw: str | None) -> dict[str, str]:
    """Parse `name=value; other=value` into a dict."""
    cookies: dict[str, str] = {}
    if not raw:
        return cookies
    for part in raw.split(";"):
        part = part.strip()
        if not part:
            continue
        if "=" not in part:
            raise ConfigError(f"Invalid cookie '{part}' (expected name=value)")
        name, value = part.split("=", 1)
        cookies[name.strip()] = value.strip()
    return cookies


def _parse_timeout(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"Invalid timeout '{raw}' (expected seconds)") from exc
    if value <= 0:
        raise ConfigError("Timeout must be a positive number of seconds")
    return value


def config_file_path() -> Path:
    """Return the INI file holding connection profiles."""
    override = os.getenv(_CONFIG_FILE_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".cronopscfg"


def _read_profile(profile: str | None) -> dict[str, str]:
    """Return the key/values of a profile, or an empty mapping if there is none."""
    path = config_file_path()
    parser = configparser.ConfigParser()
    if path.exists():
        try:
            parser.read(path)
        except configparser.Error as exc:
            raise ConfigError(f"Cannot parse {path}: {exc}") from exc

    name = profile or DEFAULT_PROFILE
    if name == DEFAULT_PROFILE:
        return dict(parser.defaults())
    if not parser.has_section(name):
        raise ConfigError(f"Profile '{name}' not found in {path}")
    return dict(parser.items(name))


def load_config(profile: str | None = None, *, host: str | None = None) -> ConsoleConfig:
    """
    Resolve connection settings for a profile.

    Precedence, highest first: the explicit `host` argument, `CRONOPS_*`
    environment variables, the profile section, built-in defaults.

    Raises:
        ConfigError: If the profile is unknown or a value is malformed.
    """
    values = _read_profile(profile)

    resolved_host = _sanitize_host(
        host or os.getenv(_HOST_ENV) or values.get("host") or DEFAULT_HOST
    )
    if not resolved_host or not resolved_host.startswith(("http://", "https://")):
        raise ConfigError(f"Invalid scheduler host '{resolved_host}' (expected http(s)://...)")

    return ConsoleConfig(
        host=resolved_host,
        profile=profile or DEFAULT_PROFILE,
        token=os.getenv(_TOKEN_ENV) or values.get("token") or None,
        cookies=_parse_cookies(os.getenv(_COOKIE_ENV) or values.get("cookie")),
        timeout=_parse_timeout(os.getenv(_TIMEOUT_ENV) or values.get("timeout")),
    )
