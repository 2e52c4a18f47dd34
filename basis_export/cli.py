import argparse
import logging
import math
import os
import re
from datetime import date, timezone
from typing import List, Optional

from dateutil import parser as dtparse
from dotenv import load_dotenv

from basis_export.errors import ArgumentValidationError, InvalidDate, InvalidUsername, MissingArgument
from basis_export.models import ExportOptions
from basis_export.providers.basis import BASIS_API_URL, DEFAULT_TIMEOUT, BasisClient
from basis_export.services.export_service import BasisExportService

# Basis identifies users by a "short-MD5": 24 lowercase hex characters.
SHORT_MD5 = re.compile(r"[a-f0-9]{24}")


def is_short_md5(value) -> bool:
    return isinstance(value, str) and SHORT_MD5.fullmatch(value) is not None


def parse_date_option(value: str) -> date:
    """Parse a free-form date string into its UTC calendar date."""
    if not value or not value.strip():
        raise InvalidDate("Invalid date option")
    try:
        parsed = dtparse.parse(value)
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError) as exc:
        raise InvalidDate(f"Invalid date option: {value!r}") from exc
    # the window ends the following day
    if parsed.date() == date.max:
        raise InvalidDate(f"Invalid date option: {value!r} is the last representable date")
    return parsed.date()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="basis-export",
        usage="%(prog)s [options] username",
        description="Print one day of Basis biometric data as JSON",
    )
    parser.add_argument("username", nargs="?", help="The short-MD5 hash that Basis uses as a username")
    parser.add_argument("-d", "--date", default=None, help="Date to get data for [default: yesterday]")
    parser.add_argument(
        "-p", "--pretty", action="store_true", default=False, help="Whether or not to pretty-print the data"
    )
    parser.add_argument("--env-file", default=".env.local", help="Env file to load before exporting")
    return parser


def resolve_args(args: argparse.Namespace) -> ExportOptions:
    username = args.username
    if not username:
        raise MissingArgument("username required")
    if not is_short_md5(username):
        raise InvalidUsername("username must be a short-MD5 hash")
    target = parse_date_option(args.date) if args.date is not None else None
    return ExportOptions(username=username, date=target, pretty=args.pretty)


def configure_logger(level_name: Optional[str] = None) -> logging.Logger:
    """Log to stderr at `level_name`, or BASIS_EXPORT_LOG_LEVEL when omitted."""
    level_name = (level_name or os.getenv("BASIS_EXPORT_LOG_LEVEL", "WARNING")).strip().upper()
    level = logging.getLevelName(level_name)
    unknown_level = not isinstance(level, int)

    logger = logging.getLogger("basis_export")
    logger.setLevel(logging.WARNING if unknown_level else level)
    logger.handlers = []
    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logger.addHandler(console)

    if unknown_level:
        logger.warning(f"Unknown log level {level_name!r}, using WARNING")
    return logger


def load_timeout(logger) -> float:
    raw = os.getenv("BASIS_HTTP_TIMEOUT", "").strip()
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError:
        timeout = None
    # requests only accepts positive, finite timeouts
    if timeout is None or not math.isfinite(timeout) or timeout <= 0:
        logger.warning(f"Ignoring invalid BASIS_HTTP_TIMEOUT={raw!r}, using {DEFAULT_TIMEOUT}")
        return DEFAULT_TIMEOUT
    return timeout


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_args(args)
    except ArgumentValidationError as exc:
        parser.error(str(exc))

    load_dotenv(args.env_file)
    logger = configure_logger()

    client = BasisClient(
        base_url=os.getenv("BASIS_API_URL", BASIS_API_URL),
        timeout=load_timeout(logger),
        logger=logger,
    )
    return BasisExportService(client, logger).run(options)


if __name__ == "__main__":
    raise SystemExit(main())
