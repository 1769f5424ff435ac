from __future__ import annotations

import json
from pathlib import Path

import pytest
from lxml import etree
from openpyxl import load_workbook

from efactura import cli
from efactura.commands import build, check
from efactura.config import DEFAULT_SETTINGS
from efactura.invoices import InvoiceInput
from efactura.schema import NS

VALID_INVOICE = {
    "invoiceNumber": "FCT 2024/001",
    "issueDate": "2024-01-15",
    "supplier": {
        "registrationName": "Supplier SRL",
        "companyId": "160796",
        "isVatPayer": True,
        "address": {
            "street": "Str. Furnizorului 1",
            "city": "Sector 3",
            "county": "Bucuresti",
            "postalZone": "030167",
            "country": "Romania",
        },
    },
    "customer": {"registrationName": "Customer SRL", "companyId": "RO87654321"},
    "lines": [{"name": "Widget", "quantity": 2, "unitPrice": 10.345, "taxPercent": 19}],
}


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(build, "configure_logging", lambda *args, **kwargs: None)
    monkeypatch.setattr(check, "configure_logging", lambda *args, **kwargs: None)
    monkeypatch.delenv("EFACTURA_SETTINGS_PATH", raising=False)


def _write_json(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_available_commands() -> None:
    assert [spec.name for spec in cli.available_commands()] == ["build", "check"]


def test_unknown_command_raises() -> None:
    with pytest.raises(ValueError, match="Unknown command: nope"):
        cli.run("nope", [])


def test_main_requires_a_command(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit):
        cli.main([])


def test_help_exits_cleanly(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["build", "--help"]) == 0
    assert "efactura build" in capsys.readouterr().out


def test_output_filename() -> None:
    assert build.output_filename("FCT 2024/001") == "FCT_2024_001.xml"
    assert build.output_filename("  ") == "invoice.xml"
    assert build.output_filename("INV-7.a") == "INV-7.a.xml"


def test_build_writes_xml_and_report(tmp_path: Path) -> None:
    source = _write_json(tmp_path / "invoice.json", VALID_INVOICE)
    output_dir = tmp_path / "xml"
    report = tmp_path / "report.xlsx"

    code = cli.main(["build", str(source), "-o", str(output_dir), "--report", str(report)])

    assert code == 0
    xml_path = output_dir / "FCT_2024_001.xml"
    root = etree.parse(str(xml_path)).getroot()
    assert root.findtext("cbc:ID", namespaces=NS) == "FCT 2024/001"
    assert root.findtext("cac:LegalMonetaryTotal/cbc:PayableAmount", namespaces=NS) == "24.63"

    rows = list(load_workbook(report)["Invoices"].iter_rows(values_only=True))
    assert rows[1][1:3] == ("FCT 2024/001", "OK")


def test_build_reports_failures(tmp_path: Path) -> None:
    broken = dict(VALID_INVOICE, invoiceNumber="BAD-1", customer=None)
    source = _write_json(tmp_path / "batch.json", [VALID_INVOICE, broken])
    unreadable = tmp_path / "missing.json"
    report = tmp_path / "report.xlsx"

    code = build.main(
        [str(source), str(unreadable), "-o", str(tmp_path / "xml"), "--report", str(report)]
    )

    assert code == 1
    assert (tmp_path / "xml" / "FCT_2024_001.xml").exists()
    assert not (tmp_path / "xml" / "BAD-1.xml").exists()
    rows = list(load_workbook(report)["Invoices"].iter_rows(values_only=True))
    statuses = [(row[1], row[2], row[3]) for row in rows[1:]]
    assert statuses[0][:2] == ("FCT 2024/001", "OK")
    assert statuses[1] == ("BAD-1", "FAILED", "Customer information is required")
    assert statuses[2][1] == "FAILED"


def test_build_uses_settings_file(tmp_path: Path) -> None:
    source = _write_json(tmp_path / "invoice.json", VALID_INVOICE)
    settings = _write_json(tmp_path / "settings.json", {"currency": "EUR", "unit_code": "H87"})

    code = build.main([str(source), "-o", str(tmp_path), "--settings", str(settings)])

    assert code == 0
    root = etree.parse(str(tmp_path / "FCT_2024_001.xml")).getroot()
    assert root.findtext("cbc:DocumentCurrencyCode", namespaces=NS) == "EUR"
    assert root.find(".//cbc:InvoicedQuantity", namespaces=NS).get("unitCode") == "H87"


def test_build_rejects_bad_settings(tmp_path: Path) -> None:
    source = _write_json(tmp_path / "invoice.json", VALID_INVOICE)
    settings = _write_json(tmp_path / "settings.json", {"currency": ""})
    assert build.main([str(source), "-o", str(tmp_path), "--settings", str(settings)]) == 2
    assert not (tmp_path / "FCT_2024_001.xml").exists()


def test_check_invoice_flags_unrecognized_identifiers() -> None:
    issues = check.check_invoice(InvoiceInput.from_dict(VALID_INVOICE), "invoice.json")
    assert [(issue.code, issue.message) for issue in issues] == [
        (
            "TAX_ID_UNRECOGNIZED",
            "Customer tax identifier 'RO87654321' is neither a valid CNP nor a valid CIF",
        )
    ]


def test_check_command_reports_structure_errors(tmp_path: Path) -> None:
    broken = dict(VALID_INVOICE, invoiceNumber="BAD-1", lines=[{"name": "", "quantity": 1, "unitPrice": 1}])
    source = _write_json(tmp_path / "batch.json", [VALID_INVOICE, broken])
    report = tmp_path / "issues.xlsx"

    code = cli.main(["check", str(source), "--report", str(report)])

    assert code == 1
    rows = list(load_workbook(report)["Issues"].iter_rows(values_only=True))
    assert rows[0] == ("source", "invoice", "code", "message")
    codes = [(row[1], row[2], row[3]) for row in rows[1:]]
    assert ("BAD-1", "STRUCTURE", "Line 1: Name is required") in codes
    assert codes[0][:2] == ("FCT 2024/001", "TAX_ID_UNRECOGNIZED")


def test_check_command_passes_with_warnings_only(tmp_path: Path) -> None:
    source = _write_json(tmp_path / "invoice.json", VALID_INVOICE)
    assert check.main([str(source)]) == 0


def test_check_command_unreadable_file(tmp_path: Path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("{oops", encoding="utf-8")
    assert check.main([str(bad)]) == 1


def test_build_refuses_to_overwrite_colliding_file_names(tmp_path: Path) -> None:
    first = dict(VALID_INVOICE, invoiceNumber="INV/1")
    second = dict(VALID_INVOICE, invoiceNumber="INV_1")
    source = _write_json(tmp_path / "batch.json", [first, second])
    output_dir = tmp_path / "xml"
    report = tmp_path / "report.xlsx"

    code = build.main([str(source), "-o", str(output_dir), "--report", str(report)])

    assert code == 1
    assert sorted(path.name for path in output_dir.iterdir()) == ["INV_1.xml"]
    root = etree.parse(str(output_dir / "INV_1.xml")).getroot()
    assert root.findtext("cbc:ID", namespaces=NS) == "INV/1"
    rows = list(load_workbook(report)["Invoices"].iter_rows(values_only=True))
    assert rows[1][1:3] == ("INV/1", "OK")
    assert rows[2][1:4] == (
        "INV_1",
        "FAILED",
        "Output file 'INV_1.xml' was already written in this run",
    )


def test_build_one_without_run_state_writes_file(tmp_path: Path) -> None:
    outcome = build.build_one(
        InvoiceInput.from_dict(VALID_INVOICE), Path("in.json"), tmp_path, DEFAULT_SETTINGS
    )
    assert outcome.status == "OK"
    assert (tmp_path / "FCT_2024_001.xml").exists()


@pytest.mark.parametrize(("alias", "name"), [("generate", "build"), ("validate", "check")])
def test_command_aliases(alias: str, name: str, tmp_path: Path) -> None:
    source = _write_json(tmp_path / "invoice.json", VALID_INVOICE)
    argv = [alias, str(source)]
    if name == "build":
        argv += ["-o", str(tmp_path / "xml")]
    assert cli.main(argv) == 0


def test_check_report_highlights_blocking_issues(tmp_path: Path) -> None:
    broken = dict(VALID_INVOICE, invoiceNumber="BAD-1", customer=None)
    source = _write_json(tmp_path / "batch.json", [VALID_INVOICE, broken])
    report = tmp_path / "issues.xlsx"

    assert check.main([str(source), "--report", str(report)]) == 1

    sheet = load_workbook(report)["Issues"]
    assert sheet.freeze_panes == "A2"
    assert sheet["A1"].font.bold
    warning_fill = sheet["C2"].fill.fgColor.rgb
    blocking_fill = sheet["C3"].fill.fgColor.rgb
    assert sheet["C3"].value == "STRUCTURE"
    assert blocking_fill.endswith("FFC7CE")
    assert not str(warning_fill).endswith("FFC7CE")
