"""Per-line amounts, VAT categories and invoice totals.

Amounts are rounded line by line before grouping; grouping first and rounding
afterwards gives different cents and is rejected by ANAF's checks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Iterable, Sequence

from .constants import DEFAULT_UNIT_CODE, VAT_EXEMPTION_REASON_CODE
from .invoices import InvoiceLine
from .utils import ZERO, parse_decimal, round_money


class TaxCategoryCode(str, Enum):
    """UNCL5305 duty/tax/fee category codes used by CIUS-RO."""

    STANDARD = "S"
    ZERO_RATED = "Z"
    OUTSIDE_SCOPE = "O"


@dataclass(frozen=True)
class TaxCategory:
    """VAT treatment of a line: category, rate and exemption reason."""

    code: TaxCategoryCode
    percent: Decimal | None = None
    exemption_reason_code: str | None = None

    @property
    def key(self) -> tuple[TaxCategoryCode, Decimal | None]:
        return self.code, self.percent


@dataclass(frozen=True)
class PricedLine:
    """An input line with its resolved amounts and category."""

    position: int
    line_id: str
    name: str
    description: str | None
    unit_code: str
    quantity: Decimal
    unit_price: Decimal
    amount: Decimal
    category: TaxCategory


@dataclass
class TaxGroup:
    """Lines sharing the same category and rate."""

    category: TaxCategory
    taxable_amount: Decimal = field(default_factory=lambda: ZERO)

    def add(self, amount: Decimal) -> None:
        """Add a (rounded) line amount to the group."""

        self.taxable_amount += amount

    @property
    def tax_amount(self) -> Decimal:
        if self.category.code is not TaxCategoryCode.STANDARD or self.category.percent is None:
            return ZERO
        return round_money(self.taxable_amount * self.category.percent / Decimal(100))


@dataclass(frozen=True)
class Totals:
    """Invoice level monetary totals."""

    taxable_amount: Decimal
    tax_amount: Decimal
    tax_inclusive_amount: Decimal
    payable_amount: Decimal


@dataclass(frozen=True)
class TaxSummary:
    """Result of pricing and aggregating every line of an invoice."""

    lines: tuple[PricedLine, ...]
    groups: tuple[TaxGroup, ...]
    totals: Totals


def classify_line(
    tax_percent: object,
    *,
    supplier_is_vat_payer: bool,
    exemption_reason_code: str = VAT_EXEMPTION_REASON_CODE,
) -> TaxCategory:
    """Return the VAT category of a line.

    Suppliers outside the VAT system always invoice with category ``O``,
    whatever rate the line carries. A missing rate counts as 0%. The rate is
    rounded to the two decimals printed in ``Percent`` before any tax is
    computed from it.
    """

    if not supplier_is_vat_payer:
        return TaxCategory(
            TaxCategoryCode.OUTSIDE_SCOPE,
            exemption_reason_code=exemption_reason_code,
        )

    percent = round_money(parse_decimal(tax_percent))
    if percent == 0:
        return TaxCategory(TaxCategoryCode.ZERO_RATED, percent=ZERO)
    return TaxCategory(TaxCategoryCode.STANDARD, percent=percent)


def price_line(
    line: InvoiceLine,
    position: int,
    *,
    supplier_is_vat_payer: bool,
    unit_code: str = DEFAULT_UNIT_CODE,
    exemption_reason_code: str = VAT_EXEMPTION_REASON_CODE,
) -> PricedLine:
    """Compute the rounded amount and category of ``line``.

    The unit price is carried with two decimals, the precision it has in
    ``PriceAmount``, so that ``quantity x price`` in the document adds up to
    the line amount.
    """

    quantity = parse_decimal(line.quantity)
    unit_price = round_money(parse_decimal(line.unit_price))
    line_id = line.id if line.id not in (None, "") else position
    return PricedLine(
        position=position,
        line_id=str(line_id),
        name=str(line.name),
        description=line.description,
        unit_code=line.unit_code or unit_code,
        quantity=quantity,
        unit_price=unit_price,
        amount=round_money(quantity * unit_price),
        category=classify_line(
            line.tax_percent,
            supplier_is_vat_payer=supplier_is_vat_payer,
            exemption_reason_code=exemption_reason_code,
        ),
    )


def aggregate(lines: Iterable[PricedLine]) -> list[TaxGroup]:
    """Group priced lines by ``(category, percent)`` in order of appearance."""

    groups: dict[tuple[TaxCategoryCode, Decimal | None], TaxGroup] = {}
    for line in lines:
        group = groups.get(line.category.key)
        if group is None:
            group = groups[line.category.key] = TaxGroup(line.category)
        group.add(line.amount)
    return list(groups.values())


def compute_totals(groups: Iterable[TaxGroup]) -> Totals:
    """Sum the group amounts into invoice totals."""

    taxable = ZERO
    tax = ZERO
    for group in groups:
        taxable += group.taxable_amount
        tax += group.tax_amount
    inclusive = taxable + tax
    return Totals(
        taxable_amount=round_money(taxable),
        tax_amount=round_money(tax),
        tax_inclusive_amount=round_money(inclusive),
        payable_amount=round_money(inclusive),
    )


def summarize(
    lines: Sequence[InvoiceLine],
    *,
    supplier_is_vat_payer: bool,
    unit_code: str = DEFAULT_UNIT_CODE,
    exemption_reason_code: str = VAT_EXEMPTION_REASON_CODE,
) -> TaxSummary:
    """Price, classify and aggregate every line of an invoice.

    An invoice without lines still reports one zero-valued group so the
    document carries a tax subtotal.
    """

    priced = tuple(
        price_line(
            line,
            position,
            supplier_is_vat_payer=supplier_is_vat_payer,
            unit_code=unit_code,
            exemption_reason_code=exemption_reason_code,
        )
        for position, line in enumerate(lines, start=1)
    )
    groups = aggregate(priced)
    if not groups:
        groups = [
            TaxGroup(
                classify_line(
                    0,
                    supplier_is_vat_payer=supplier_is_vat_payer,
                    exemption_reason_code=exemption_reason_code,
                )
            )
        ]
    return TaxSummary(lines=priced, groups=tuple(groups), totals=compute_totals(groups))


__all__ = [
    "PricedLine",
    "TaxCategory",
    "TaxCategoryCode",
    "TaxGroup",
    "TaxSummary",
    "Totals",
    "aggregate",
    "classify_line",
    "compute_totals",
    "price_line",
    "summarize",
]
