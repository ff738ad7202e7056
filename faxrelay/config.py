"""Relay configuration: defaults, TOML file, environment and command line."""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from faxrelay.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path("/etc/faxrelay/faxrelay.toml")
DEFAULT_HTTP_BIND_ADDRESS = "127.0.0.1"
DEFAULT_HTTP_PORT = 7500

ENV_PREFIX = "FAXRELAY_"

# Settings that may come from the environment. ``unsafe`` and
# ``skip_request_validation`` are deliberately not in this list.
_ENV_FIELDS: tuple[str, ...] = (
    "http_bind_address",
    "http_port",
    "http_user",
    "http_pwd",
    "tls_cert_file",
    "tls_key_file",
    "fax_number",
    "mobile_number",
    "accounts_file",
    "twilio_sid",
    "twilio_token",
    "public_base_url",
    "log_level",
    "log_dir",
)


class RelayConfig(BaseModel):
    """Top-level configuration for the fax relay server."""

    http_bind_address: str = DEFAULT_HTTP_BIND_ADDRESS
    http_port: int = DEFAULT_HTTP_PORT
    http_user: str = ""
    http_pwd: str = ""
    tls_cert_file: str = ""
    tls_key_file: str = ""
    unsafe: bool = False
    fax_number: str = ""
    mobile_number: str = ""
    accounts_file: str = ""
    twilio_sid: str = ""
    twilio_token: str = ""
    skip_request_validation: bool = False
    public_base_url: str = ""
    log_level: str = "INFO"
    log_dir: str = ""

    @property
    def has_credentials(self) -> bool:
        return bool(self.http_user and self.http_pwd)

    @property
    def has_tls(self) -> bool:
        return bool(self.tls_cert_file and self.tls_key_file)


def _normalize_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    """Map ``http-bind-address`` style keys onto model field names."""
    return {key.replace("-", "_"): value for key, value in data.items()}


def read_config_file(path: Path) -> dict[str, Any]:
    """Parse a TOML config file. A missing file yields an empty dict."""
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        logger.debug("Config file not found, using defaults: %s", path)
        return {}
    except OSError as exc:
        msg = f"cannot read config file {path}: {exc}"
        raise ConfigError(msg) from exc
    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        msg = f"malformed config file {path}: {exc}"
        raise ConfigError(msg) from exc
    return _normalize_keys(data)


def read_env_config(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Collect non-empty ``FAXRELAY_*`` variables."""
    env = os.environ if environ is None else environ
    result: dict[str, str] = {}
    for name in _ENV_FIELDS:
        value = env.get(f"{ENV_PREFIX}{name.upper()}", "")
        if value:
            result[name] = value
    return result


def overlay(base: dict[str, Any], updates: Mapping[str, Any]) -> dict[str, Any]:
    """Return *base* with every non-empty value from *updates* applied on top."""
    merged = dict(base)
    for key, value in updates.items():
        if value is None or value == "":
            continue
        merged[key] = value
    return merged


def load_config(
    path: Path | None = None,
    cmdline: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> RelayConfig:
    """Build the effective config, lowest to highest priority.

    1. model defaults
    2. TOML file (``path`` or ``DEFAULT_CONFIG_FILE``)
    3. environment (``FAXRELAY_*``)
    4. command line
    """
    data: dict[str, Any] = {}
    data = overlay(data, read_config_file(path or DEFAULT_CONFIG_FILE))
    data = overlay(data, read_env_config(environ))
    data = overlay(data, cmdline or {})
    try:
        return RelayConfig.model_validate(data)
    except ValidationError as exc:
        msg = f"invalid configuration: {exc}"
        raise ConfigError(msg) from exc
