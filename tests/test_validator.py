from __future__ import annotations

from decimal import Decimal
from typing import Callable

import pytest

from conftest import make_invoice
from efactura.errors import ValidationError
from efactura.invoices import InvoiceInput, InvoiceLine
from efactura.validator import validate_invoice


def _mutate(action: Callable[[InvoiceInput], None]) -> InvoiceInput:
    invoice = make_invoice()
    action(invoice)
    return invoice


def _set(path: str, value: object) -> Callable[[InvoiceInput], None]:
    def action(invoice: InvoiceInput) -> None:
        *parents, leaf = path.split(".")
        target: object = invoice
        for name in parents:
            target = getattr(target, name)
        setattr(target, leaf, value)

    return action


def _set_line(index: int, name: str, value: object) -> Callable[[InvoiceInput], None]:
    def action(invoice: InvoiceInput) -> None:
        setattr(invoice.lines[index], name, value)

    return action


@pytest.mark.parametrize(
    ("action", "message"),
    [
        (_set("invoice_number", None), "Invoice number is required"),
        (_set("invoice_number", "  "), "Invoice number is required"),
        (_set("issue_date", ""), "Issue date is required"),
        (_set("supplier", None), "Supplier information is required"),
        (_set("supplier.registration_name", ""), "Supplier registration name is required"),
        (_set("supplier.company_id", None), "Supplier company ID is required"),
        (_set("supplier.address", None), "Supplier address is required"),
        (_set("supplier.address.street", ""), "Supplier street address is required"),
        (_set("supplier.address.city", None), "Supplier city is required"),
        (_set("supplier.address.postal_code", " "), "Supplier postal zone is required"),
        (_set("customer", None), "Customer information is required"),
        (_set("customer.registration_name", None), "Customer registration name is required"),
        (_set("lines", None), "Invoice lines array is required"),
        (_set_line(0, "name", ""), "Line 1: Name is required"),
        (_set_line(1, "quantity", "1"), "Line 2: Quantity must be a number"),
        (_set_line(1, "quantity", float("nan")), "Line 2: Quantity must be a number"),
        (_set_line(1, "quantity", True), "Line 2: Quantity must be a number"),
        (_set_line(0, "unit_price", -1), "Line 1: Unit price must be a non-negative number"),
        (_set_line(0, "unit_price", "50"), "Line 1: Unit price must be a non-negative number"),
        (_set_line(0, "tax_percent", 101), "Line 1: Tax percent must be between 0 and 100"),
        (_set_line(0, "tax_percent", -5), "Line 1: Tax percent must be between 0 and 100"),
        (_set_line(0, "tax_percent", "19"), "Line 1: Tax percent must be between 0 and 100"),
    ],
)
def test_validation_messages(action, message: str) -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_invoice(_mutate(action))
    assert excinfo.value.message == message
    assert str(excinfo.value) == message


def test_valid_invoice_passes(invoice: InvoiceInput) -> None:
    validate_invoice(invoice)


def test_first_failure_wins() -> None:
    invoice = make_invoice()
    invoice.invoice_number = None
    invoice.customer = None
    with pytest.raises(ValidationError, match="Invoice number is required"):
        validate_invoice(invoice)


def test_customer_address_and_company_id_are_optional(invoice: InvoiceInput) -> None:
    invoice.customer.address = None
    invoice.customer.company_id = None
    validate_invoice(invoice)


def test_empty_line_list_is_accepted(invoice: InvoiceInput) -> None:
    invoice.lines = []
    validate_invoice(invoice)


@pytest.mark.parametrize("value", [0, 100, Decimal("9.5"), None])
def test_tax_percent_boundaries(invoice: InvoiceInput, value: object) -> None:
    invoice.lines[0].tax_percent = value
    validate_invoice(invoice)


def test_negative_quantity_is_accepted(invoice: InvoiceInput) -> None:
    invoice.lines.append(InvoiceLine(name="Return", quantity=-1, unit_price=Decimal("5.5")))
    validate_invoice(invoice)


def test_later_line_errors_are_numbered(invoice: InvoiceInput) -> None:
    invoice.lines.append(InvoiceLine(name="Third", quantity=1, unit_price=None))
    with pytest.raises(ValidationError, match="Line 3: Unit price must be a non-negative number"):
        validate_invoice(invoice)
