"""Assembly of Romanian e-Factura (CIUS-RO UBL) invoices.

The public entry point is :func:`efactura.builder.build_invoice_xml`; the
other modules expose the validation, normalisation and tax helpers it is
built from.
"""

__all__ = [
    "address",
    "builder",
    "cli",
    "commands",
    "config",
    "constants",
    "countries",
    "errors",
    "identifiers",
    "invoices",
    "logging",
    "schema",
    "tax_table",
    "utils",
    "validator",
]
