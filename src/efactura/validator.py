"""Structural validation of invoice input.

The checks run in a fixed order and stop at the first failure. Both the
order and the message text are relied upon by calling systems, so neither
may change without a version bump.
"""

from __future__ import annotations

from typing import Any

from .errors import ValidationError
from .invoices import InvoiceInput, InvoiceLine
from .utils import is_number, parse_decimal


def validate_invoice(invoice: InvoiceInput) -> None:
    """Raise :class:`ValidationError` for the first structural defect found."""

    if _is_blank(invoice.invoice_number):
        raise ValidationError("Invoice number is required")
    if _is_blank(invoice.issue_date):
        raise ValidationError("Issue date is required")

    supplier = invoice.supplier
    if supplier is None:
        raise ValidationError("Supplier information is required")
    if _is_blank(supplier.registration_name):
        raise ValidationError("Supplier registration name is required")
    if _is_blank(supplier.company_id):
        raise ValidationError("Supplier company ID is required")

    address = supplier.address
    if address is None:
        raise ValidationError("Supplier address is required")
    if _is_blank(address.street):
        raise ValidationError("Supplier street address is required")
    if _is_blank(address.city):
        raise ValidationError("Supplier city is required")
    if _is_blank(address.postal_code):
        raise ValidationError("Supplier postal zone is required")

    customer = invoice.customer
    if customer is None:
        raise ValidationError("Customer information is required")
    if _is_blank(customer.registration_name):
        raise ValidationError("Customer registration name is required")

    if invoice.lines is None:
        raise ValidationError("Invoice lines array is required")

    for position, line in enumerate(invoice.lines, start=1):
        _validate_line(line, position)


def _validate_line(line: InvoiceLine, position: int) -> None:
    if _is_blank(line.name):
        raise ValidationError(f"Line {position}: Name is required")
    if not is_number(line.quantity):
        raise ValidationError(f"Line {position}: Quantity must be a number")
    if not is_number(line.unit_price) or parse_decimal(line.unit_price) < 0:
        raise ValidationError(f"Line {position}: Unit price must be a non-negative number")
    if line.tax_percent is not None:
        if not is_number(line.tax_percent) or not 0 <= parse_decimal(line.tax_percent) <= 100:
            raise ValidationError(f"Line {position}: Tax percent must be between 0 and 100")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


__all__ = ["ValidationError", "validate_invoice"]
