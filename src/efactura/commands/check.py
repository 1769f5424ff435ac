"""Check JSON invoice files without producing XML."""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from ..errors import ValidationError
from ..identifiers import is_valid_company_code, is_valid_personal_code
from ..invoices import InvoiceInput, load_invoices
from ..logging import ExcelLogger, ExcelLoggerConfig, configure_logging, get_logger
from ..validator import validate_invoice

LOGGER = get_logger("commands.check")

BLOCKING_CODES = frozenset({"STRUCTURE", "UNREADABLE"})


@dataclass
class CheckIssue:
    """A problem found in an invoice file."""

    source: str
    invoice_number: str
    code: str
    message: str

    def as_cells(self) -> list[str]:
        return [self.source, self.invoice_number, self.code, self.message]


def check_invoice(invoice: InvoiceInput, source: str) -> list[CheckIssue]:
    """Return the structural error and identifier warnings of ``invoice``."""

    number = str(invoice.invoice_number or "").strip()
    try:
        validate_invoice(invoice)
    except ValidationError as exc:
        return [CheckIssue(source, number, "STRUCTURE", exc.message)]

    issues: list[CheckIssue] = []
    for role, party in (("Supplier", invoice.supplier), ("Customer", invoice.customer)):
        company_id = party.company_id if party is not None else None
        if not isinstance(company_id, str) or not company_id.strip():
            continue
        value = company_id.strip()
        if not (is_valid_personal_code(value) or is_valid_company_code(value)):
            issues.append(
                CheckIssue(
                    source,
                    number,
                    "TAX_ID_UNRECOGNIZED",
                    f"{role} tax identifier '{value}' is neither a valid CNP nor a valid CIF",
                )
            )
    return issues


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="efactura check",
        description="Validate JSON invoice files without generating XML.",
    )
    parser.add_argument("inputs", nargs="+", type=Path, help="JSON invoice files")
    parser.add_argument("--report", type=Path, help="Write the issues to an Excel file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug messages")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    issues: list[CheckIssue] = []
    for source in args.inputs:
        try:
            invoices = load_invoices(source)
        except (OSError, ValueError) as exc:
            issues.append(CheckIssue(str(source), "", "UNREADABLE", str(exc)))
            continue
        for invoice in invoices:
            issues.extend(check_invoice(invoice, str(source)))

    for issue in issues:
        log = LOGGER.error if issue.code in BLOCKING_CODES else LOGGER.warning
        log("%s [%s] %s: %s", issue.source, issue.invoice_number, issue.code, issue.message)

    if args.report is not None:
        logger = ExcelLogger(
            ExcelLoggerConfig(
                columns=("source", "invoice", "code", "message"),
                filename=str(args.report),
                sheet_title="Issues",
                highlight_column="code",
                highlight_values=BLOCKING_CODES,
            )
        )
        LOGGER.info("Report saved to %s", logger.write_rows(issues))

    blocking = sum(1 for issue in issues if issue.code in BLOCKING_CODES)
    return 1 if blocking else 0


if __name__ == "__main__":  # pragma: no cover - direct execution
    raise SystemExit(main())
