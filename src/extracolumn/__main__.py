"""CLI entry point for extracolumn.

Usage:
    python -m extracolumn [--spreadsheet ID_OR_URL] [--range 'Sheet!F:F' | --sheet NAME --column F]
                          [--output FILE] [--auth-mode adc|service_account|keyring|token]

With no arguments, exports column F of the Diagnostics sheet to ./diagnostics.txt.
"""

from __future__ import annotations

import argparse
import asyncio
import functools
import sys
from collections.abc import Sequence
from typing import Any

from loguru import logger
from pydantic import ValidationError

from extracolumn import __version__
from extracolumn.config import AUTH_MODES, Settings
from extracolumn.credentials import CredentialProvider, CredentialsError, create_provider
from extracolumn.exporter import ColumnExporter, ExportError, ExportRequest, TransportFactory
from extracolumn.logging import configure_logging
from extracolumn.ranges import InvalidRangeError, column_range
from extracolumn.transport import GoogleSheetsTransport

REMEDIATION_HINTS = (
    "Make sure you have:",
    "   1. Run the sheet's diagnostics routine (inspectSheetStructure) so the column is filled",
    "   2. Installed extracolumn and its dependencies: pip install extracolumn",
    "   3. Authenticated, e.g. gcloud auth application-default login",
)


def print_hints() -> None:
    """Print the static remediation hints shown after a failure."""
    print(file=sys.stderr)
    for line in REMEDIATION_HINTS:
        print(line, file=sys.stderr)


async def run_export(
    settings: Settings,
    credentials: CredentialProvider | None = None,
    transport_factory: TransportFactory | None = None,
) -> int:
    """Run one export and map the outcome to an exit code."""
    if transport_factory is None:
        transport_factory = functools.partial(GoogleSheetsTransport, timeout=settings.timeout)

    try:
        if credentials is None:
            credentials = create_provider(settings)
        request = ExportRequest(
            source_id=settings.spreadsheet_id,
            range_reference=settings.range_reference,
            output_path=settings.output_path,
        )
        exporter = ColumnExporter(credentials, transport_factory)
        result = await exporter.export(request)
    except (ExportError, CredentialsError, InvalidRangeError) as e:
        logger.opt(exception=e).debug("Export failed")
        print(f"Error exporting {settings.range_reference}: {e}", file=sys.stderr)
        print_hints()
        return 1

    print(f"Exported {settings.range_reference} to: {result.output_path}")
    print(f"{result.row_count} lines written")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="extracolumn",
        description="Export one column of a Google Sheet to a local text file",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--spreadsheet",
        help="Spreadsheet ID or full Google Sheets URL",
    )
    range_group = parser.add_mutually_exclusive_group()
    range_group.add_argument(
        "--range",
        dest="range_reference",
        help="Full-column range in A1 notation, e.g. 'Diagnostics!F:F'",
    )
    range_group.add_argument(
        "--sheet",
        help="Sheet name (combine with --column)",
    )
    parser.add_argument(
        "--column",
        help="Column letter to export with --sheet (default: F)",
    )
    parser.add_argument(
        "-o",
        "--output",
        dest="output_path",
        help="Output file, overwritten on each run (default: diagnostics.txt)",
    )
    parser.add_argument(
        "--auth-mode",
        choices=AUTH_MODES,
        help="Where to get credentials from (default: adc)",
    )
    parser.add_argument(
        "--service-account",
        dest="service_account_path",
        help="Service account JSON key file (implies --auth-mode service_account)",
    )
    parser.add_argument(
        "--access-token",
        help="OAuth2 access token to use as-is (implies --auth-mode token)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="HTTP timeout in seconds (default: 60)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output to stderr",
    )
    return parser


def settings_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Collect the settings given on the command line."""
    overrides: dict[str, Any] = {}
    if args.sheet:
        overrides["range_reference"] = column_range(args.sheet, args.column or "F")
    elif args.range_reference:
        overrides["range_reference"] = args.range_reference
    for name in ("output_path", "timeout", "service_account_path", "access_token"):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value
    if args.spreadsheet:
        overrides["spreadsheet_id"] = args.spreadsheet
    if args.auth_mode:
        overrides["auth_mode"] = args.auth_mode
    elif args.access_token:
        overrides["auth_mode"] = "token"
    elif args.service_account_path:
        overrides["auth_mode"] = "service_account"
    if args.verbose:
        overrides["log_level"] = "DEBUG"
    return overrides


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.column and not args.sheet:
        parser.error("--column requires --sheet")

    try:
        settings = Settings(**settings_overrides(args))
    except (ValidationError, InvalidRangeError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    configure_logging(log_level=settings.log_level, json=settings.log_json)
    result: int = asyncio.run(run_export(settings))
    return result


if __name__ == "__main__":
    sys.exit(main())
