"""
Entry point for the keenetic-client CLI.

Usage:
    keenetic-client --test              Authenticate and print router info
    keenetic-client --show PATH         GET /rci/show/PATH and print JSON
    keenetic-client --rci JSON          Execute raw RCI command(s)
    keenetic-client --backup FILE       Save the startup configuration to FILE
    keenetic-client --help              Show help message
    keenetic-client --version           Show version and exit

Exit Codes:
    0 - Success
    1 - Configuration error (missing host, login or password)
    2 - Connection error (router unreachable or timed out)
    3 - Authentication error (wrong credentials)
    4 - API error (router rejected the request)
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from keenetic_client.client import KeeneticClient

from keenetic_client import __version__

# Exit codes
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_CONNECTION_ERROR = 2
EXIT_AUTH_ERROR = 3
EXIT_API_ERROR = 4


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="keenetic-client",
        description="Talk to a Keenetic router through its RCI interface",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit Codes:
  0   Success
  1   Configuration error
  2   Connection error (cannot reach router, timeout)
  3   Authentication error (invalid credentials)
  4   API error

Environment Variables:
  CONFIG_PATH                Path to YAML configuration file
  KEENETIC_HOST              Router hostname or IP
  KEENETIC_LOGIN             Router admin login
  KEENETIC_PASSWORD          Router admin password
  KEENETIC_PASSWORD_FILE     Path to file containing password (Docker secrets)
  KEENETIC_REQUEST_TIMEOUT   Request timeout in seconds (default: 30)
  KEENETIC_CONNECT_TIMEOUT   Connect timeout in seconds (default: 10)
  KEENETIC_LOG_LEVEL         Logging level: DEBUG, INFO, WARNING, ERROR
  KEENETIC_LOG_FORMAT        Log format: json or text

Examples:
  # Check credentials
  KEENETIC_HOST=192.168.1.1 KEENETIC_LOGIN=admin KEENETIC_PASSWORD=secret keenetic-client --test

  # Read interface list
  keenetic-client --show interface

  # Batch of raw commands
  keenetic-client --rci '[{"show": {"system": {}}}, {"show": {"version": {}}}]'

  # Backup configuration, retrying while the router boots
  keenetic-client --backup router.txt --retries 5
""",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--config",
        metavar="FILE",
        help="Path to YAML configuration file (same as CONFIG_PATH)",
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=1,
        metavar="N",
        help=(
            "Attempts on connection errors and timeouts (default: 1, no retry). "
            "Applies to --test, --show and --backup; --rci commands are sent once"
        ),
    )

    action = parser.add_mutually_exclusive_group(required=True)
    action.add_argument(
        "--test",
        action="store_true",
        help="Authenticate and print router model and firmware, then exit",
    )
    action.add_argument(
        "--show",
        metavar="PATH",
        help="Print the result of GET /rci/show/PATH",
    )
    action.add_argument(
        "--rci",
        metavar="JSON",
        help="Execute a JSON command object or list of commands",
    )
    action.add_argument(
        "--backup",
        metavar="FILE",
        help="Download the startup configuration into FILE",
    )
    return parser.parse_args(argv)


def print_banner(client: "KeeneticClient", info: dict) -> None:
    """Print router summary after a successful connection test."""
    lines = [
        "",
        f"Keenetic Client v{__version__}",
        "=" * 40,
        f"Router:   {client.settings.base_url}",
        f"Model:    {info.get('model') or 'unknown'}",
        f"Device:   {info.get('device') or 'unknown'}",
        f"Firmware: {info.get('firmware_version') or 'unknown'}",
        "=" * 40,
        "",
    ]
    for line in lines:
        print(line)


def run_action(args: argparse.Namespace, client: "KeeneticClient") -> int:
    """Run the requested action against an open client."""
    from keenetic_client.api.endpoints import show_path

    if args.test:
        client.authenticate()
        print_banner(client, client.system.info())
        print("Configuration and connection: OK")
        return EXIT_SUCCESS

    if args.show is not None:
        print(json.dumps(client.get(show_path(args.show)), indent=2, ensure_ascii=False))
        return EXIT_SUCCESS

    if args.rci is not None:
        try:
            commands = json.loads(args.rci)
        except ValueError as e:
            print(f"Invalid JSON for --rci: {e}", file=sys.stderr)
            return EXIT_CONFIG_ERROR
        print(json.dumps(client.rci(commands), indent=2, ensure_ascii=False))
        return EXIT_SUCCESS

    content = client.startup_config.download() or ""
    Path(args.backup).write_text(content)
    print(f"Saved startup configuration to {args.backup} ({len(content)} bytes)")
    return EXIT_SUCCESS


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for keenetic-client.

    Returns:
        Exit code (0=success, 1=config error, 2=connection error,
        3=auth error, 4=API error)
    """
    args = parse_args(argv)

    # Import here to allow --help without loading dependencies
    from keenetic_client.api.session import create_retry_decorator
    from keenetic_client.client import KeeneticClient
    from keenetic_client.config import load_config
    from keenetic_client.exceptions import (
        AuthenticationError,
        ConfigurationError,
        ConnectionError,
        KeeneticError,
        TimeoutError,
    )
    from keenetic_client.logging import configure_logging, get_logger

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    configure_logging(log_format=config.log_format, log_level=config.log_level)
    log = get_logger()

    # Raw RCI commands may write; they are not safe to replay
    action = run_action
    if args.rci is None:
        action = create_retry_decorator(max_retries=args.retries)(run_action)

    try:
        with KeeneticClient(config, logger=log) as client:
            return action(args, client)
    except (ConnectionError, TimeoutError) as e:
        log.error("connection_failed", error=e.message)
        print(f"\nConnection error: {e}", file=sys.stderr)
        return EXIT_CONNECTION_ERROR
    except AuthenticationError as e:
        log.error("authentication_failed", error=e.message)
        print(f"\nAuthentication error: {e}", file=sys.stderr)
        return EXIT_AUTH_ERROR
    except KeeneticError as e:
        log.error("request_failed", error=e.message)
        print(f"\nError: {e}", file=sys.stderr)
        return e.exit_code


if __name__ == "__main__":
    sys.exit(main())
