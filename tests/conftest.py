from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from efactura.invoices import Address, InvoiceInput, InvoiceLine, Party  # noqa: E402


def make_invoice() -> InvoiceInput:
    """Return a valid invoice: Bucharest VAT payer selling to a Cluj company."""

    return InvoiceInput(
        invoice_number="INV-001",
        issue_date="2024-01-15",
        supplier=Party(
            registration_name="Supplier SRL",
            company_id="160796",
            is_vat_payer=True,
            address=Address(
                street="Str. Furnizorului 1",
                city="Sector 3",
                county="Bucuresti",
                postal_code="030167",
                country="Romania",
            ),
        ),
        customer=Party(
            registration_name="Customer SRL",
            company_id="RO87654321",
            address=Address(
                street="Str. Clientului 2",
                city="Cluj-Napoca",
                county="Cluj",
                postal_code="400000",
                country="Romania",
            ),
        ),
        lines=[
            InvoiceLine(
                id="custom-line",
                name="Product with tax",
                description="First product",
                quantity=2,
                unit_code="HUR",
                unit_price=50,
                tax_percent=19,
            ),
            InvoiceLine(name="Service without tax", quantity=1, unit_price=10),
        ],
    )


@pytest.fixture
def invoice() -> InvoiceInput:
    return make_invoice()
