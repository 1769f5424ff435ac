"""Excel reports for batch invoice builds."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Iterable

from openpyxl import Workbook

from ..tax_table import Totals

STATUS_OK = "OK"
STATUS_FAILED = "FAILED"


@dataclass
class InvoiceOutcome:
    """Result of processing one invoice of a batch."""

    source: str
    invoice_number: str
    status: str
    message: str = ""
    currency: str = ""
    totals: Totals | None = None
    output: str = ""

    def as_cells(self) -> list[object]:
        """Serialise the outcome for tabular export."""

        totals = self.totals
        return [
            self.source,
            self.invoice_number,
            self.status,
            self.message,
            self.currency,
            totals.taxable_amount if totals else None,
            totals.tax_amount if totals else None,
            totals.payable_amount if totals else None,
            self.output,
        ]


@dataclass
class CurrencyTotals:
    """Running sums of built invoices for one currency."""

    count: int = 0
    taxable_amount: Decimal = field(default_factory=lambda: Decimal("0"))
    tax_amount: Decimal = field(default_factory=lambda: Decimal("0"))
    payable_amount: Decimal = field(default_factory=lambda: Decimal("0"))

    def add(self, totals: Totals) -> None:
        """Add the totals of one invoice."""

        self.count += 1
        self.taxable_amount += totals.taxable_amount
        self.tax_amount += totals.tax_amount
        self.payable_amount += totals.payable_amount


def aggregate_outcomes(outcomes: Iterable[InvoiceOutcome]) -> dict[str, CurrencyTotals]:
    """Sum the totals of successful outcomes per currency."""

    by_currency: dict[str, CurrencyTotals] = {}
    for outcome in outcomes:
        if outcome.status != STATUS_OK or outcome.totals is None:
            continue
        by_currency.setdefault(outcome.currency, CurrencyTotals()).add(outcome.totals)
    return by_currency


def write_excel_report(outcomes: list[InvoiceOutcome], destination: Path) -> Path:
    """Generate a workbook with a per-currency summary and one row per invoice."""

    destination.parent.mkdir(parents=True, exist_ok=True)

    workbook = Workbook()
    summary_ws = workbook.active
    summary_ws.title = "Summary"
    summary_ws.append(["Currency", "Invoices", "Taxable", "VAT", "Payable"])

    by_currency = aggregate_outcomes(outcomes)
    for currency in sorted(by_currency):
        totals = by_currency[currency]
        summary_ws.append(
            [
                currency,
                totals.count,
                totals.taxable_amount,
                totals.tax_amount,
                totals.payable_amount,
            ]
        )

    failed = sum(1 for outcome in outcomes if outcome.status != STATUS_OK)
    summary_ws.append([])
    summary_ws.append(["Failed invoices", failed])

    invoices_ws = workbook.create_sheet(title="Invoices")
    invoices_ws.append(
        [
            "Source",
            "Invoice",
            "Status",
            "Message",
            "Currency",
            "Taxable",
            "VAT",
            "Payable",
            "Output",
        ]
    )
    for outcome in outcomes:
        invoices_ws.append(outcome.as_cells())

    workbook.save(destination)
    return destination


__all__ = [
    "CurrencyTotals",
    "InvoiceOutcome",
    "STATUS_FAILED",
    "STATUS_OK",
    "aggregate_outcomes",
    "write_excel_report",
]
