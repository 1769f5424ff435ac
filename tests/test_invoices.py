from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

import pytest

from efactura.invoices import InvoiceInput, load_invoices

CAMEL_CASE_PAYLOAD = {
    "invoiceNumber": "F-10",
    "issueDate": "2024-03-01",
    "dueDate": "2024-03-31",
    "invoiceTypeCode": "381",
    "currency": "EUR",
    "paymentIban": "RO49AAAA1B31007593840000",
    "supplier": {
        "registrationName": "Furnizor SRL",
        "companyId": "RO160796",
        "registrationNumber": "J40/1/2020",
        "isVatPayer": True,
        "address": {
            "street": "Str. A 1",
            "city": "Sector 1",
            "postalZone": "010101",
            "county": "Bucuresti",
            "country": "Romania",
        },
    },
    "customer": {"registrationName": "Client SRL", "companyId": "18547290"},
    "lines": [
        {"id": 7, "name": "Widget", "quantity": 2, "unitPrice": 10.5, "taxPercent": 19, "unitCode": "H87"},
        "not an object",
    ],
}


def test_from_dict_accepts_camel_case_keys() -> None:
    invoice = InvoiceInput.from_dict(CAMEL_CASE_PAYLOAD)
    assert invoice.invoice_number == "F-10"
    assert invoice.due_date == "2024-03-31"
    assert invoice.invoice_type_code == "381"
    assert invoice.payment_iban == "RO49AAAA1B31007593840000"
    assert invoice.supplier.is_vat_payer is True
    assert invoice.supplier.registration_number == "J40/1/2020"
    assert invoice.supplier.address.postal_code == "010101"
    assert invoice.customer.address is None
    assert invoice.customer.is_vat_payer is False
    first, second = invoice.lines
    assert (first.id, first.unit_price, first.tax_percent, first.unit_code) == (7, 10.5, 19, "H87")
    assert second.name is None and second.quantity is None


def test_from_dict_accepts_snake_case_keys() -> None:
    invoice = InvoiceInput.from_dict(
        {
            "invoice_number": "A1",
            "issue_date": "2024-01-01",
            "supplier": {"registration_name": "S", "company_id": "1", "is_vat_payer": True},
            "customer": {"registration_name": "C"},
            "lines": [{"name": "X", "quantity": 1, "unit_price": 1, "tax_percent": 9}],
        }
    )
    assert invoice.supplier.registration_name == "S"
    assert invoice.supplier.address is None
    assert invoice.lines[0].tax_percent == 9


def test_from_dict_missing_lines_is_none() -> None:
    invoice = InvoiceInput.from_dict({"invoiceNumber": "A1", "lines": "nope"})
    assert invoice.lines is None
    assert invoice.supplier is None


def test_load_invoices_single_object_keeps_decimals(tmp_path: Path) -> None:
    path = tmp_path / "invoice.json"
    path.write_text(json.dumps(CAMEL_CASE_PAYLOAD), encoding="utf-8")
    (invoice,) = load_invoices(path)
    assert invoice.lines[0].unit_price == Decimal("10.5")
    assert isinstance(invoice.lines[0].unit_price, Decimal)


def test_load_invoices_list(tmp_path: Path) -> None:
    path = tmp_path / "batch.json"
    path.write_text(json.dumps([CAMEL_CASE_PAYLOAD, {"invoiceNumber": "F-11"}]), encoding="utf-8")
    numbers = [invoice.invoice_number for invoice in load_invoices(path)]
    assert numbers == ["F-10", "F-11"]


@pytest.mark.parametrize(("payload", "message"), [("42", "must contain"), ("[1]", "entry 1")])
def test_load_invoices_rejects_bad_payloads(tmp_path: Path, payload: str, message: str) -> None:
    path = tmp_path / "bad.json"
    path.write_text(payload, encoding="utf-8")
    with pytest.raises(ValueError, match=message):
        load_invoices(path)


def test_from_dict_turns_numeric_identifiers_into_strings() -> None:
    invoice = InvoiceInput.from_dict(
        {
            "supplier": {"registrationName": "S", "companyId": 160796, "registrationNumber": Decimal("42")},
            "customer": {"registrationName": "C", "companyId": True},
        }
    )
    assert invoice.supplier.company_id == "160796"
    assert invoice.supplier.registration_number == "42"
    assert invoice.customer.company_id is True
