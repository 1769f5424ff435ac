"""Invoice input model.

The dataclasses mirror the loosely-typed payload callers send: any field may
be missing or carry the wrong type, and :mod:`efactura.validator` is the
single place that decides whether the payload is complete enough to build a
document.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterable, Mapping


@dataclass
class Address:
    """Postal address of a party."""

    street: str | None
    city: str | None
    postal_code: str | None
    country: str | None = None
    county: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Address":
        return cls(
            street=_pick(data, "street"),
            city=_pick(data, "city"),
            postal_code=_pick(data, "postal_code", "postalCode", "postal_zone", "postalZone"),
            country=_pick(data, "country"),
            county=_pick(data, "county"),
        )


@dataclass
class Party:
    """Supplier or customer."""

    registration_name: str | None
    company_id: str | None
    address: Address | None
    is_vat_payer: bool = False
    registration_number: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Party":
        address = _pick(data, "address")
        return cls(
            registration_name=_pick(data, "registration_name", "registrationName"),
            company_id=_identifier(_pick(data, "company_id", "companyId")),
            address=Address.from_dict(address) if isinstance(address, Mapping) else None,
            is_vat_payer=bool(_pick(data, "is_vat_payer", "isVatPayer")),
            registration_number=_identifier(
                _pick(data, "registration_number", "registrationNumber")
            ),
        )


@dataclass
class InvoiceLine:
    """A single invoice line as received from the caller."""

    name: str | None
    quantity: Any
    unit_price: Any
    tax_percent: Any = None
    id: str | int | None = None
    description: str | None = None
    unit_code: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "InvoiceLine":
        return cls(
            name=_pick(data, "name"),
            quantity=_pick(data, "quantity"),
            unit_price=_pick(data, "unit_price", "unitPrice"),
            tax_percent=_pick(data, "tax_percent", "taxPercent"),
            id=_pick(data, "id"),
            description=_pick(data, "description"),
            unit_code=_pick(data, "unit_code", "unitCode"),
        )


@dataclass
class InvoiceInput:
    """Everything needed to assemble one CIUS-RO invoice."""

    invoice_number: str | None
    issue_date: str | int | float | date | None
    supplier: Party | None
    customer: Party | None
    lines: list[InvoiceLine] | None = field(default_factory=list)
    due_date: str | int | float | date | None = None
    invoice_type_code: str | None = None
    currency: str | None = None
    payment_iban: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "InvoiceInput":
        """Build an invoice from a JSON-like mapping.

        Keys are snake_case; the camelCase spellings used by JavaScript
        clients (``invoiceNumber``, ``paymentIban``, ...) are accepted too.
        """

        supplier = _pick(data, "supplier")
        customer = _pick(data, "customer")
        raw_lines = _pick(data, "lines")
        lines: list[InvoiceLine] | None
        if isinstance(raw_lines, list):
            lines = [
                InvoiceLine.from_dict(item)
                if isinstance(item, Mapping)
                else InvoiceLine(name=None, quantity=None, unit_price=None)
                for item in raw_lines
            ]
        else:
            lines = None

        return cls(
            invoice_number=_pick(data, "invoice_number", "invoiceNumber"),
            issue_date=_pick(data, "issue_date", "issueDate"),
            supplier=Party.from_dict(supplier) if isinstance(supplier, Mapping) else None,
            customer=Party.from_dict(customer) if isinstance(customer, Mapping) else None,
            lines=lines,
            due_date=_pick(data, "due_date", "dueDate"),
            invoice_type_code=_pick(data, "invoice_type_code", "invoiceTypeCode"),
            currency=_pick(data, "currency"),
            payment_iban=_pick(data, "payment_iban", "paymentIban"),
        )


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _identifier(value: Any) -> Any:
    """Return numeric identifiers (``"companyId": 160796``) as digit strings."""

    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, Decimal) and value.is_finite() and value == value.to_integral_value():
        return str(int(value))
    return value


def load_invoices(path: Path) -> Iterable[InvoiceInput]:
    """Load invoices from a JSON file holding one object or a list of objects."""

    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle, parse_float=Decimal)

    if isinstance(payload, Mapping):
        payload = [payload]
    if not isinstance(payload, list):
        raise ValueError(f"'{path}' must contain an invoice object or a list of invoices")

    invoices: list[InvoiceInput] = []
    for index, item in enumerate(payload, start=1):
        if not isinstance(item, Mapping):
            raise ValueError(f"'{path}': entry {index} is not a JSON object")
        invoices.append(InvoiceInput.from_dict(item))
    return invoices


__all__ = ["Address", "InvoiceInput", "InvoiceLine", "Party", "load_invoices"]
