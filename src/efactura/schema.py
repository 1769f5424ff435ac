"""UBL 2.1 namespaces and small lxml helpers."""

from __future__ import annotations

from pathlib import Path

from lxml import etree

NS = {
    "ubl": "urn:oasis:names:specification:ubl:schema:xsd:Invoice-2",
    "cac": "urn:oasis:names:specification:ubl:schema:xsd:CommonAggregateComponents-2",
    "cbc": "urn:oasis:names:specification:ubl:schema:xsd:CommonBasicComponents-2",
}

# The document element uses the Invoice namespace as default namespace.
NSMAP = {None: NS["ubl"], "cac": NS["cac"], "cbc": NS["cbc"]}

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'


def qname(tag: str) -> str:
    """Return the Clark notation for ``prefix:Local`` (``ubl`` when unprefixed)."""

    prefix, local = tag.split(":", 1) if ":" in tag else ("ubl", tag)
    return f"{{{NS[prefix]}}}{local}"


def sub_element(
    parent: etree._Element, tag: str, text: object | None = None, **attribs: str
) -> etree._Element:
    """Create a child element with optional text and attributes."""

    element = etree.SubElement(parent, qname(tag))
    if text is not None:
        element.text = str(text)
    for key, value in attribs.items():
        element.set(key, str(value))
    return element


def serialize(root: etree._Element) -> str:
    """Serialise ``root`` with a double-quoted UTF-8 XML declaration."""

    body = etree.tostring(root, pretty_print=True, encoding="unicode")
    return f"{XML_DECLARATION}\n{body}"


def parse_document(source: str | bytes | Path) -> etree._ElementTree:
    """Parse an invoice from a string, bytes or a file path."""

    if isinstance(source, Path):
        return etree.parse(str(source))
    if isinstance(source, str):
        source = source.encode("utf-8")
    return etree.ElementTree(etree.fromstring(source))


__all__ = ["NS", "NSMAP", "XML_DECLARATION", "parse_document", "qname", "serialize", "sub_element"]
