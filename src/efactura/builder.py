"""Assembly of CIUS-RO UBL invoices.

:func:`build_invoice_xml` validates the input, normalises both parties,
prices and aggregates the lines and returns the serialised document.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from lxml import etree

from .address import (
    is_bucharest_subdivision,
    is_domestic_invoice,
    resolve_bucharest_sector,
    resolve_country_name,
    resolve_county,
)
from .config import DEFAULT_SETTINGS, Settings
from .constants import INVOICE_TYPE_CODES, INVOICE_TYPE_COMMERCIAL, TAX_SCHEME_ID
from .identifiers import normalize_tax_identifier, resolve_country_from_identifier
from .invoices import Address, InvoiceInput, Party
from .logging import get_logger
from .schema import NSMAP, qname, serialize, sub_element
from .tax_table import (
    PricedLine,
    TaxCategory,
    TaxCategoryCode,
    TaxSummary,
    summarize,
)
from .utils import format_amount, format_quantity
from .utils.dates import format_date
from .validator import validate_invoice

LOGGER = get_logger("builder")


def build_invoice_xml(invoice: InvoiceInput, *, settings: Settings | None = None) -> str:
    """Return the CIUS-RO XML for ``invoice``.

    Raises:
        ValidationError: If the input is structurally incomplete. Nothing is
            produced in that case.
    """

    return serialize(build_invoice_document(invoice, settings=settings))


def build_invoice_document(
    invoice: InvoiceInput, *, settings: Settings | None = None
) -> etree._Element:
    """Return the ``Invoice`` element tree for ``invoice``."""

    return assemble_invoice(invoice, settings=settings).root


@dataclass(frozen=True)
class AssembledInvoice:
    """The document tree together with the amounts it was built from."""

    root: etree._Element
    summary: TaxSummary

    def to_xml(self) -> str:
        return serialize(self.root)


def assemble_invoice(
    invoice: InvoiceInput, *, settings: Settings | None = None
) -> AssembledInvoice:
    """Validate ``invoice`` and build its document tree and tax summary."""

    settings = settings or DEFAULT_SETTINGS
    validate_invoice(invoice)
    return _InvoiceAssembler(invoice, settings).build()


def resolve_party_country_code(party: Party, default: str) -> str:
    """Return the alpha-2 country of ``party``.

    The address country wins over the identifier prefix; ``default`` is used
    when neither can be resolved.
    """

    address = party.address
    if address is not None and address.country:
        code = resolve_country_name(address.country)
        if code:
            return code

    company_id = _identifier_text(party.company_id)
    if company_id:
        name = resolve_country_from_identifier(company_id)
        if name:
            code = resolve_country_name(name)
            if code:
                return code
    return default


def _identifier_text(value: object) -> str | None:
    # Integer identifiers are accepted as their digits.
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, (int, Decimal)) and not isinstance(value, bool):
        return str(value)
    return None


class _InvoiceAssembler:
    def __init__(self, invoice: InvoiceInput, settings: Settings) -> None:
        self.invoice = invoice
        self.settings = settings
        self.currency = invoice.currency or settings.currency
        self.supplier_is_vat_payer = bool(invoice.supplier and invoice.supplier.is_vat_payer)

    def build(self) -> AssembledInvoice:
        invoice = self.invoice
        summary = summarize(
            invoice.lines or [],
            supplier_is_vat_payer=self.supplier_is_vat_payer,
            unit_code=self.settings.unit_code,
            exemption_reason_code=self.settings.exemption_reason_code,
        )

        root = etree.Element(qname("Invoice"), nsmap=NSMAP)
        self._add_header(root)

        supplier_el = sub_element(root, "cac:AccountingSupplierParty")
        self._add_party(supplier_el, invoice.supplier, with_tax_scheme=self.supplier_is_vat_payer)
        customer_el = sub_element(root, "cac:AccountingCustomerParty")
        self._add_party(
            customer_el,
            invoice.customer,
            with_tax_scheme=self.supplier_is_vat_payer and bool(invoice.customer.is_vat_payer),
        )

        self._add_payment_means(root)
        self._add_tax_total(root, summary)
        self._add_monetary_total(root, summary)
        for line in summary.lines:
            self._add_line(root, line)

        LOGGER.debug(
            "Invoice %s assembled: %d line(s), %d tax group(s), payable %s %s",
            invoice.invoice_number,
            len(summary.lines),
            len(summary.groups),
            format_amount(summary.totals.payable_amount),
            self.currency,
        )
        return AssembledInvoice(root=root, summary=summary)

    # ── Header ──────────────────────────────────────────────────
    def _add_header(self, root: etree._Element) -> None:
        invoice = self.invoice
        issue_date = format_date(invoice.issue_date)
        due_date = format_date(invoice.due_date) if invoice.due_date not in (None, "") else issue_date

        type_code = str(invoice.invoice_type_code or INVOICE_TYPE_COMMERCIAL)
        if type_code not in INVOICE_TYPE_CODES:
            LOGGER.warning(
                "Invoice %s: unexpected invoice type code %r", invoice.invoice_number, type_code
            )

        sub_element(root, "cbc:CustomizationID", self.settings.customization_id)
        sub_element(root, "cbc:ID", str(invoice.invoice_number).strip())
        sub_element(root, "cbc:IssueDate", issue_date)
        sub_element(root, "cbc:DueDate", due_date)
        sub_element(root, "cbc:InvoiceTypeCode", type_code)
        sub_element(root, "cbc:DocumentCurrencyCode", self.currency)

    # ── Parties ─────────────────────────────────────────────────
    def _add_party(self, parent: etree._Element, party: Party, *, with_tax_scheme: bool) -> None:
        tax_id = None
        company_id = _identifier_text(party.company_id)
        if company_id:
            tax_id = normalize_tax_identifier(company_id, strict=self.settings.strict_identifiers)

        party_el = sub_element(parent, "cac:Party")
        if party.address is not None:
            self._add_postal_address(party_el, party)

        if with_tax_scheme and tax_id:
            scheme_el = sub_element(party_el, "cac:PartyTaxScheme")
            sub_element(scheme_el, "cbc:CompanyID", tax_id)
            self._add_tax_scheme(scheme_el)

        legal_el = sub_element(party_el, "cac:PartyLegalEntity")
        sub_element(legal_el, "cbc:RegistrationName", str(party.registration_name).strip())
        company_id = _identifier_text(party.registration_number) or tax_id
        if company_id:
            sub_element(legal_el, "cbc:CompanyID", company_id)

    def _add_postal_address(self, parent: etree._Element, party: Party) -> None:
        address: Address = party.address  # type: ignore[assignment]
        country_code = resolve_party_country_code(party, self.settings.default_country_code)
        city, county = self._sanitize_locality(address, country_code, party)

        address_el = sub_element(parent, "cac:PostalAddress")
        if address.street:
            sub_element(address_el, "cbc:StreetName", address.street)
        if city:
            sub_element(address_el, "cbc:CityName", city)
        if address.postal_code:
            sub_element(address_el, "cbc:PostalZone", address.postal_code)
        if county:
            sub_element(address_el, "cbc:CountrySubentity", county)
        country_el = sub_element(address_el, "cac:Country")
        sub_element(country_el, "cbc:IdentificationCode", country_code)

    def _sanitize_locality(
        self, address: Address, country_code: str, party: Party
    ) -> tuple[str | None, str | None]:
        city = address.city
        county = address.county
        if not is_domestic_invoice(country_code, self.settings.default_country):
            return city, county

        subdivision = resolve_county(county)
        if subdivision is None:
            if county:
                LOGGER.debug("%s: county %r not recognised", party.registration_name, county)
            return city, county

        if is_bucharest_subdivision(subdivision):
            sector = resolve_bucharest_sector(city)
            if sector is not None:
                return sector, subdivision
            LOGGER.debug("%s: no Bucharest sector found in %r", party.registration_name, city)
        return city, subdivision

    # ── Payment ─────────────────────────────────────────────────
    def _add_payment_means(self, root: etree._Element) -> None:
        means_el = sub_element(root, "cac:PaymentMeans")
        sub_element(means_el, "cbc:PaymentMeansCode", self.settings.payment_means_code)
        iban = self.invoice.payment_iban
        if iban and str(iban).strip():
            account_el = sub_element(means_el, "cac:PayeeFinancialAccount")
            sub_element(account_el, "cbc:ID", str(iban).strip())

    # ── Totals ──────────────────────────────────────────────────
    def _add_tax_total(self, root: etree._Element, summary: TaxSummary) -> None:
        tax_total_el = sub_element(root, "cac:TaxTotal")
        self._amount(tax_total_el, "cbc:TaxAmount", summary.totals.tax_amount)
        for group in summary.groups:
            subtotal_el = sub_element(tax_total_el, "cac:TaxSubtotal")
            self._amount(subtotal_el, "cbc:TaxableAmount", group.taxable_amount)
            self._amount(subtotal_el, "cbc:TaxAmount", group.tax_amount)
            self._add_category(subtotal_el, "cac:TaxCategory", group.category, with_reason=True)

    def _add_monetary_total(self, root: etree._Element, summary: TaxSummary) -> None:
        totals = summary.totals
        monetary_el = sub_element(root, "cac:LegalMonetaryTotal")
        self._amount(monetary_el, "cbc:LineExtensionAmount", totals.taxable_amount)
        self._amount(monetary_el, "cbc:TaxExclusiveAmount", totals.taxable_amount)
        self._amount(monetary_el, "cbc:TaxInclusiveAmount", totals.tax_inclusive_amount)
        self._amount(monetary_el, "cbc:PayableAmount", totals.payable_amount)

    # ── Lines ───────────────────────────────────────────────────
    def _add_line(self, root: etree._Element, line: PricedLine) -> None:
        line_el = sub_element(root, "cac:InvoiceLine")
        sub_element(line_el, "cbc:ID", line.line_id)
        sub_element(
            line_el,
            "cbc:InvoicedQuantity",
            format_quantity(line.quantity),
            unitCode=line.unit_code,
        )
        self._amount(line_el, "cbc:LineExtensionAmount", line.amount)

        item_el = sub_element(line_el, "cac:Item")
        if line.description and line.description != line.name:
            sub_element(item_el, "cbc:Description", line.description)
        sub_element(item_el, "cbc:Name", line.name)
        self._add_category(item_el, "cac:ClassifiedTaxCategory", line.category, with_reason=False)

        price_el = sub_element(line_el, "cac:Price")
        self._amount(price_el, "cbc:PriceAmount", line.unit_price)

    # ── Helpers ─────────────────────────────────────────────────
    def _add_category(
        self, parent: etree._Element, tag: str, category: TaxCategory, *, with_reason: bool
    ) -> None:
        category_el = sub_element(parent, tag)
        sub_element(category_el, "cbc:ID", category.code.value)
        if category.code is not TaxCategoryCode.OUTSIDE_SCOPE and category.percent is not None:
            sub_element(category_el, "cbc:Percent", format_amount(category.percent))
        if with_reason and category.exemption_reason_code:
            sub_element(category_el, "cbc:TaxExemptionReasonCode", category.exemption_reason_code)
        self._add_tax_scheme(category_el)

    @staticmethod
    def _add_tax_scheme(parent: etree._Element) -> None:
        scheme_el = sub_element(parent, "cac:TaxScheme")
        sub_element(scheme_el, "cbc:ID", TAX_SCHEME_ID)

    def _amount(self, parent: etree._Element, tag: str, value: Decimal) -> etree._Element:
        return sub_element(parent, tag, format_amount(value), currencyID=self.currency)


__all__ = [
    "AssembledInvoice",
    "assemble_invoice",
    "build_invoice_document",
    "build_invoice_xml",
    "resolve_party_country_code",
]
