"""Entry point: python -m faxrelay."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

from rich.console import Console

from faxrelay.app import FaxRelay
from faxrelay.config import DEFAULT_CONFIG_FILE, RelayConfig, load_config
from faxrelay.errors import FaxRelayError
from faxrelay.logging_config import setup_logging

logger = logging.getLogger(__name__)

_console = Console(stderr=True)

# argparse dest -> RelayConfig field
_FLAG_FIELDS: dict[str, str] = {
    "http": "http_bind_address",
    "port": "http_port",
    "user": "http_user",
    "pwd": "http_pwd",
    "tlscert": "tls_cert_file",
    "tlskey": "tls_key_file",
    "unsafe": "unsafe",
    "fax": "fax_number",
    "sms": "mobile_number",
    "accounts": "accounts_file",
    "sid": "twilio_sid",
    "token": "twilio_token",
    "skip_req_val": "skip_request_validation",
    "public_url": "public_base_url",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="faxrelay",
        description="Accept Twilio faxes and text each account's contacts when one arrives.",
    )
    parser.add_argument("--config", type=Path, default=None, help=f"config file path (default {DEFAULT_CONFIG_FILE})")
    parser.add_argument("--http", help="HTTP bind address")
    parser.add_argument("--port", type=int, help="HTTP port")
    parser.add_argument("--user", help="username expected when authenticating HTTP requests")
    parser.add_argument("--pwd", help="user password expected when authenticating HTTP requests")
    parser.add_argument("--tlscert", help="path to TLS cert file")
    parser.add_argument("--tlskey", help="path to TLS key file")
    parser.add_argument(
        "--unsafe",
        action="store_true",
        default=None,
        help="must be specified if not using TLS or basic auth",
    )
    parser.add_argument("--fax", help="your fax number")
    parser.add_argument("--sms", help="your mobile number")
    parser.add_argument("--accounts", help="fax account file")
    parser.add_argument("--sid", help="Twilio SID")
    parser.add_argument("--token", help="Twilio token")
    parser.add_argument(
        "--skip-req-val",
        action="store_true",
        default=None,
        help="skips Twilio request signature validation",
    )
    parser.add_argument("--public-url", help="public base URL Twilio calls (for signature checks)")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def cmdline_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Translate parsed flags into config field overrides (unset flags omitted)."""
    values = vars(args)
    return {
        field: values[dest] for dest, field in _FLAG_FIELDS.items() if values.get(dest) is not None
    }


async def _serve(config: RelayConfig) -> None:
    await FaxRelay(config).run_forever()


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config, cmdline_overrides(args))
    except FaxRelayError as exc:
        _console.print(f"[bold red]{exc}[/bold red]")
        return 1

    level = logging.getLevelName(config.log_level.upper())
    setup_logging(
        level=level if isinstance(level, int) else logging.INFO,
        verbose=args.verbose,
        log_dir=Path(config.log_dir).expanduser() if config.log_dir else None,
    )

    try:
        asyncio.run(_serve(config))
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except (FaxRelayError, OSError) as exc:
        logger.error("Startup failed: %s", exc)
        _console.print(f"[bold red]{exc}[/bold red]")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
