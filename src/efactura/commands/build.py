"""Build CIUS-RO XML documents from JSON invoice files."""

from __future__ import annotations

import argparse
import logging
import re
from pathlib import Path
from typing import Sequence

from ..builder import assemble_invoice
from ..config import Settings, SettingsError, load_settings
from ..errors import ValidationError
from ..invoices import InvoiceInput, load_invoices
from ..logging import configure_logging, get_logger
from ..utils.reporting import (
    STATUS_FAILED,
    STATUS_OK,
    InvoiceOutcome,
    write_excel_report,
)

LOGGER = get_logger("commands.build")

_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9._-]+")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="efactura build",
        description="Build CIUS-RO UBL invoices from JSON files.",
    )
    parser.add_argument("inputs", nargs="+", type=Path, help="JSON invoice files")
    parser.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        default=Path("."),
        help="Directory for the generated XML files (default: current directory)",
    )
    parser.add_argument("--settings", type=Path, help="JSON settings file")
    parser.add_argument("--report", type=Path, help="Write an Excel report to this path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug messages")
    parser.add_argument("--log-file", type=Path, help="Also log to this file")
    return parser


def output_filename(invoice_number: str) -> str:
    """Return a filesystem safe ``<invoice number>.xml`` name."""

    stem = _UNSAFE_FILENAME.sub("_", invoice_number.strip()).strip("._") or "invoice"
    return f"{stem}.xml"


def build_one(
    invoice: InvoiceInput,
    source: Path,
    output_dir: Path,
    settings: Settings,
    written: set[str] | None = None,
) -> InvoiceOutcome:
    """Build a single invoice and write it to ``output_dir``.

    ``written`` collects the case-folded file names produced earlier in the
    same run. An invoice whose file name is already taken fails instead of
    overwriting the earlier document.
    """

    number = str(invoice.invoice_number or "").strip()
    try:
        assembled = assemble_invoice(invoice, settings=settings)
    except ValidationError as exc:
        LOGGER.error("%s: invoice %s rejected: %s", source, number or "(no number)", exc)
        return InvoiceOutcome(
            source=str(source),
            invoice_number=number,
            status=STATUS_FAILED,
            message=exc.message,
        )

    destination = output_dir / output_filename(number)
    if written is not None:
        key = destination.name.casefold()
        if key in written:
            message = f"Output file '{destination.name}' was already written in this run"
            LOGGER.error("%s: invoice %s skipped: %s", source, number, message)
            return InvoiceOutcome(
                source=str(source),
                invoice_number=number,
                status=STATUS_FAILED,
                message=message,
            )
        written.add(key)

    destination.write_text(assembled.to_xml(), encoding="utf-8")
    LOGGER.info("%s: invoice %s written to %s", source, number, destination)
    return InvoiceOutcome(
        source=str(source),
        invoice_number=number,
        status=STATUS_OK,
        currency=invoice.currency or settings.currency,
        totals=assembled.summary.totals,
        output=str(destination),
    )


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    try:
        settings = load_settings(args.settings)
    except SettingsError as exc:
        LOGGER.error("%s", exc)
        return 2

    args.output_dir.mkdir(parents=True, exist_ok=True)
    written: set[str] = set()
    outcomes: list[InvoiceOutcome] = []
    for source in args.inputs:
        try:
            invoices = load_invoices(source)
        except (OSError, ValueError) as exc:
            LOGGER.error("%s: cannot read invoices: %s", source, exc)
            outcomes.append(
                InvoiceOutcome(
                    source=str(source),
                    invoice_number="",
                    status=STATUS_FAILED,
                    message=str(exc),
                )
            )
            continue
        for invoice in invoices:
            outcomes.append(build_one(invoice, source, args.output_dir, settings, written))

    if args.report is not None:
        destination = write_excel_report(outcomes, args.report)
        LOGGER.info("Report saved to %s", destination)

    failed = [outcome for outcome in outcomes if outcome.status != STATUS_OK]
    LOGGER.info("%d invoice(s) built, %d failed", len(outcomes) - len(failed), len(failed))
    return 1 if failed else 0


if __name__ == "__main__":  # pragma: no cover - direct execution
    raise SystemExit(main())
