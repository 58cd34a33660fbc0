#!/usr/bin/env python
"""
Translation coverage checker.

Lists the keys of the default-locale dictionary that each other locale
does not define. Missing keys are not errors at runtime (the translator
falls back to the default locale), so by default this only reports.

Usage:
    python scripts/check_translations.py
    python scripts/check_translations.py --locale pt-BR --strict

Exit codes:
    0 - Complete, or incomplete without --strict
    1 - Keys missing and --strict given
    2 - Unsupported locale requested
"""

import argparse
import sys
from pathlib import Path

# Add the backend directory to the path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from loguru import logger  # noqa: E402

from models.locale import DEFAULT_LOCALE, SUPPORTED_LOCALES  # noqa: E402
from services.translation_service import missing_keys  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    """Report missing translation keys."""
    parser = argparse.ArgumentParser(description="Report missing translation keys")
    parser.add_argument(
        "--locale",
        action="append",
        choices=SUPPORTED_LOCALES,
        help="Locale to check (repeatable; default: every non-default locale)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when any key is missing",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Print counts only, not the individual keys",
    )

    args = parser.parse_args(argv)

    locales = args.locale or [
        locale for locale in SUPPORTED_LOCALES if locale != DEFAULT_LOCALE.value
    ]

    total_missing = 0
    for locale in locales:
        keys = missing_keys(locale)
        total_missing += len(keys)
        if not keys:
            logger.info(f"{locale}: complete")
            continue

        logger.warning(f"{locale}: {len(keys)} missing keys")
        if not args.quiet:
            for key in keys:
                print(f"  {locale}  {key}")

    if total_missing and args.strict:
        logger.error(f"{total_missing} translation keys missing")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
