"""Command-line interface for Invoice Ledger."""

import argparse
import json
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

from invoice_ledger import __version__
from invoice_ledger.config import get_settings
from invoice_ledger.domain.documents import Document, relevant_date
from invoice_ledger.domain.summary import (
    DiscountLine,
    PaidLine,
    SubtotalLine,
    SummaryLine,
    TotalLine,
    VatLine,
)
from invoice_ledger.domain.value_objects import Currency, DateBase
from invoice_ledger.exceptions import InvoiceLedgerError, UnhandledVariantError
from invoice_ledger.logging_config import LogContext, configure_logging
from invoice_ledger.services.ingestion import load_documents_file
from invoice_ledger.services.lineage import (
    DocumentLineage,
    LineageConfig,
    resolve_lineage,
)
from invoice_ledger.services.numbering import build_number_strategy
from invoice_ledger.services.summary import SummaryConfig, SummaryEngine


def format_amount(value: int, currency: Currency) -> str:
    """Render minor units as a decimal amount, e.g. 21780 -> EUR 217.80."""
    return f"{currency.value} {Decimal(value).scaleb(-2):,.2f}"


def format_summary_line(line: SummaryLine, currency: Currency) -> str:
    match line:
        case SubtotalLine(subtype=None):
            label = "Subtotal"
        case SubtotalLine():
            label = "Total discounts"
        case DiscountLine(discount=discount):
            label = f"Discount ({discount.reason})" if discount.reason else "Discount"
            return f"{label:<28}{'-' + format_amount(line.value, currency):>20}"
        case VatLine(rate=rate):
            label = f"VAT {(rate * 100).normalize():f}%"
        case TotalLine():
            label = "Total"
        case PaidLine():
            label = "Paid"
        case _:
            raise UnhandledVariantError(
                type(line).__name__, ["subtotal", "discount", "vat", "total", "paid"]
            )
    return f"{label:<28}{format_amount(line.value, currency):>20}"


def _describe(document: Document) -> str:
    return f"{document.document_type.value} {document.number}"


def _load_lineage(args: argparse.Namespace) -> DocumentLineage:
    settings = get_settings()
    with LogContext(source_file=args.file):
        documents = load_documents_file(Path(args.file))
        return resolve_lineage(documents, LineageConfig.from_settings(settings))


def cmd_summary(args: argparse.Namespace) -> int:
    """Print the totals block of one document."""
    try:
        settings = get_settings()
        lineage = _load_lineage(args)

        matches = [
            document
            for document in lineage.documents
            if args.number in (document.number, document.id)
            and (args.type is None or document.document_type.value == args.type)
        ]
        if not matches:
            print(f"Error: No document with number {args.number}")
            return 1
        if len(matches) > 1:
            kinds = ", ".join(_describe(document) for document in matches)
            print(f"Error: Number {args.number} is ambiguous ({kinds}); use --type")
            return 1

        document = matches[0]
        lines = SummaryEngine(SummaryConfig.from_settings(settings)).summarize_document(document)

        if args.json:
            print(json.dumps([line.to_dict() for line in lines], indent=2))
            return 0

        print(_describe(document))
        for line in lines:
            print(f"  {format_summary_line(line, settings.currency)}")
        return 0

    except InvoiceLedgerError as e:
        print(f"Error: {e.message}")
        return 1


def cmd_stacks(args: argparse.Namespace) -> int:
    """Print the lineage stack of every document."""
    try:
        lineage = _load_lineage(args)
    except InvoiceLedgerError as e:
        print(f"Error: {e.message}")
        return 1

    if args.json:
        print(json.dumps({key: list(value) for key, value in lineage.stacks.items()}, indent=2))
        return 0

    for document in lineage.documents:
        members = " -> ".join(
            _describe(member) for member in lineage.stack_documents(document.id)
        )
        print(f"{_describe(document)}: {members}")
    return 0


def cmd_squash(args: argparse.Namespace) -> int:
    """Print the overview: one document per lineage group."""
    try:
        settings = get_settings()
        lineage = _load_lineage(args)
        engine = SummaryEngine(SummaryConfig.from_settings(settings))
        source = LineageConfig.from_settings(settings).receipt_date_source

        for document in lineage.squash():
            print(
                f"{relevant_date(document, source).isoformat()}  "
                f"{_describe(document):<32}"
                f"{format_amount(engine.total(document.items, document.discounts), settings.currency):>20}"
            )
        return 0

    except InvoiceLedgerError as e:
        print(f"Error: {e.message}")
        return 1


def cmd_number(args: argparse.Namespace) -> int:
    """Print the next numbers a fresh strategy would hand out."""
    try:
        reference_date = date.fromisoformat(args.date) if args.date else None
    except ValueError:
        print(f"Error: Invalid date: {args.date}")
        return 1

    try:
        strategy = build_number_strategy(args.strategy, args.digits, args.base)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    for _ in range(args.count):
        print(strategy.next(reference_date))
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Show version information."""
    print(f"Invoice Ledger v{__version__}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="invoice-ledger",
        description="Invoice Ledger - Quotes, invoices and receipts",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # summary command
    summary_parser = subparsers.add_parser("summary", help="Show the totals of a document")
    summary_parser.add_argument("file", help="JSON file with documents")
    summary_parser.add_argument("number", help="Document number or id")
    summary_parser.add_argument(
        "--type",
        choices=["quote", "invoice", "receipt"],
        default=None,
        help="Document type, when the number is shared",
    )
    summary_parser.add_argument("--json", action="store_true", help="Output JSON")
    summary_parser.set_defaults(func=cmd_summary)

    # stacks command
    stacks_parser = subparsers.add_parser("stacks", help="Show related documents")
    stacks_parser.add_argument("file", help="JSON file with documents")
    stacks_parser.add_argument("--json", action="store_true", help="Output JSON")
    stacks_parser.set_defaults(func=cmd_stacks)

    # squash command
    squash_parser = subparsers.add_parser(
        "squash", help="Show one document per quote/invoice/receipt chain"
    )
    squash_parser.add_argument("file", help="JSON file with documents")
    squash_parser.set_defaults(func=cmd_squash)

    # number command
    number_parser = subparsers.add_parser("number", help="Generate document numbers")
    number_parser.add_argument("strategy", choices=["increment", "date"])
    number_parser.add_argument(
        "--count", "-n", type=int, default=1, help="How many numbers (default: 1)"
    )
    number_parser.add_argument(
        "--date", default=None, help="Reference date YYYY-MM-DD (default: today)"
    )
    number_parser.add_argument(
        "--digits", type=int, default=None, help="Zero-padding width"
    )
    number_parser.add_argument(
        "--base",
        choices=[base.value for base in DateBase],
        default=DateBase.YYYYMMDD.value,
        help="Date bucket format (default: yyyyMMdd)",
    )
    number_parser.set_defaults(func=cmd_number)

    # version command
    version_parser = subparsers.add_parser("version", help="Show version")
    version_parser.set_defaults(func=cmd_version)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging()

    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
