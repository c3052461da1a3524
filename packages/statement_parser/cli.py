import argparse
import json
import logging
import os
import sys

import structlog

from packages.statement_parser.detector import list_profiles
from packages.statement_parser.errors import StatementRejectedError
from packages.statement_parser.importer import import_statement_sync
from packages.statement_parser.recognition import AMOUNT_POLICIES


def _configure_logging(verbose: bool) -> None:
    # Logs go to stderr so --json output stays clean on stdout
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.WARNING
        ),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )


def import_file(args) -> int:
    if not os.path.exists(args.file):
        print(f"❌ File not found: {args.file}")
        return 1

    with open(args.file, "rb") as f:
        content = f.read()

    try:
        report = import_statement_sync(
            os.path.basename(args.file),
            content,
            bank_type=args.bank,
            amount_policy=args.amount_policy,
            password=args.password,
        )
    except StatementRejectedError as e:
        print(f"❌ {e.detail}")
        if e.suggestion:
            print(f"   {e.suggestion}")
        return 2
    except ValueError as e:
        print(f"❌ {e}")
        return 2

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
        return 0

    print(f"📂 {report.file_name} ({report.media_type})")
    print(f"   Bank: {report.bank_name or 'Unknown (generic)'}")
    print(f"   Strategy: {report.strategy or '-'}")
    period = report.statement_period
    if period.start_date:
        print(f"   Period: {period.start_date} to {period.end_date}")
    print(f"   Transactions: {report.transaction_count}")

    for txn in report.transactions:
        sign = "-" if txn.direction == "debit" else "+"
        print(
            f"   {txn.date}  {sign}{txn.amount:>12,.2f}  {txn.category:<14} {txn.description}"
        )

    for issue in report.errors:
        marker = "❌" if issue.severity == "error" else "⚠️"
        where = f"row {issue.row}: " if issue.row is not None else ""
        print(f"{marker} {where}{issue.message}")

    return 0


def list_banks(args) -> int:
    for profile in list_profiles():
        print(f"{profile.code:<8} {profile.display_name or 'Generic (any bank)'}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Bank statement import CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logs")
    subparsers = parser.add_subparsers(dest="command")

    # Import
    imp_parser = subparsers.add_parser("import", help="Parse a CSV/PDF statement")
    imp_parser.add_argument("file", help="Path to CSV or PDF statement")
    imp_parser.add_argument(
        "--bank", type=str, default=None, help="Skip detection and use this bank profile"
    )
    imp_parser.add_argument(
        "--amount-policy",
        choices=sorted(AMOUNT_POLICIES),
        default=None,
        help="Which amount on a text row is the transaction",
    )
    imp_parser.add_argument("--password", type=str, default=None, help="PDF password")
    imp_parser.add_argument("--json", action="store_true", help="Print the report as JSON")

    # Banks
    subparsers.add_parser("banks", help="List supported bank profiles")

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.command == "import":
        return import_file(args)
    elif args.command == "banks":
        return list_banks(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
