"""Fixed codes and defaults used when assembling CIUS-RO invoices."""

from __future__ import annotations

DEFAULT_CURRENCY = "RON"

# UN/ECE Rec 20 "each"
DEFAULT_UNIT_CODE = "EA"

DEFAULT_COUNTRY = "Romania"
DEFAULT_COUNTRY_CODE = "RO"

UBL_CUSTOMIZATION_ID = (
    "urn:cen.eu:en16931:2017#compliant#urn:efactura.mfinante.ro:CIUS-RO:1.0.1"
)

# Reason code carried by the "O" (outside scope) tax category.
VAT_EXEMPTION_REASON_CODE = "VATEX-EU-O"

# UNCL4461: credit transfer
PAYMENT_MEANS_CODE = "30"

TAX_SCHEME_ID = "VAT"

INVOICE_TYPE_COMMERCIAL = "380"
INVOICE_TYPE_CREDIT_NOTE = "381"
INVOICE_TYPE_CODES = frozenset({INVOICE_TYPE_COMMERCIAL, INVOICE_TYPE_CREDIT_NOTE})

BUCHAREST_SUBDIVISION = "RO-B"

__all__ = [
    "BUCHAREST_SUBDIVISION",
    "DEFAULT_COUNTRY",
    "DEFAULT_COUNTRY_CODE",
    "DEFAULT_CURRENCY",
    "DEFAULT_UNIT_CODE",
    "INVOICE_TYPE_CODES",
    "INVOICE_TYPE_COMMERCIAL",
    "INVOICE_TYPE_CREDIT_NOTE",
    "PAYMENT_MEANS_CODE",
    "TAX_SCHEME_ID",
    "UBL_CUSTOMIZATION_ID",
    "VAT_EXEMPTION_REASON_CODE",
]
