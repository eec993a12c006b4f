from decimal import Decimal
from pathlib import Path

from ubl2cii.convert import convert_document
from ubl2cii.errors import ErrorList
from ubl2cii.model import cii
from ubl2cii.model.ubl import DocumentVariant
from ubl2cii.parsing.ubl import read_document

HERE = Path(__file__).parent


def _read(name: str):
    errors = ErrorList()
    document = read_document(HERE / name, errors)
    assert errors.contains_no_error(), list(errors)
    return document


def test_absent_document_is_rejected():
    errors = ErrorList()
    assert convert_document(None, errors) is None
    assert len(errors) == 1
    assert errors.contains_error()


def test_simple_invoice_totals():
    errors = ErrorList()
    result = convert_document(_read("ubl_invoice_simple.xml"), errors)
    assert len(errors) == 0

    summation = result.transaction.settlement.monetary_summation
    assert summation.grand_total.value == Decimal("119")
    assert summation.tax_total == cii.Amount(Decimal("19"), "EUR")
    assert summation.line_total.value == Decimal("100")

    (item,) = result.transaction.line_items
    assert item.document.parent_line_id is None
    assert item.document.line_id == "1"


def test_simple_invoice_header():
    result = convert_document(_read("ubl_invoice_simple.xml"), ErrorList())

    assert result.context.guideline_id == "urn:cen.eu:en16931:2017"
    assert result.context.business_process_id.startswith("urn:fdc:peppol.eu")
    assert result.document.id == "INV-2024-001"
    assert result.document.type_code == "380"
    assert result.document.issue_date == cii.DateTime("20240315")
    assert result.document.notes == ("Thank you for your order",)

    agreement = result.transaction.agreement
    assert agreement.buyer_reference == "BR-77"
    assert agreement.seller.name == "Seller Trading"
    assert agreement.seller.tax_registrations[0].id == cii.ID("DE123456789", "VA")
    assert agreement.buyer.name == "Buyer AG"
    assert agreement.buyer_order_reference.issuer_assigned_id == "PO-555"
    assert agreement.contract_reference.issuer_assigned_id == "CT-9"
    assert [r.type_code for r in agreement.additional_references] == ["50", "916"]
    attachment = agreement.additional_references[1].attachments[0]
    assert attachment.value == "aG91cnM7MTA="

    settlement = result.transaction.settlement
    assert settlement.currency_code == "EUR"
    (tax,) = settlement.taxes
    assert tax.category_code == "S"
    assert tax.rate_percent == Decimal("19")
    assert tax.basis_amount.value == Decimal("100")


def test_sub_lines_are_flattened():
    errors = ErrorList()
    result = convert_document(_read("ubl_invoice_sublines.xml"), errors)
    assert errors.contains_no_error()

    items = result.transaction.line_items
    assert len(items) == 3
    assert [i.document.line_id for i in items] == ["1", "1.1", "1.2"]
    assert [i.document.parent_line_id for i in items] == [None, "1", "1"]

    parent = items[0]
    assert parent.settlement.monetary_summation.line_total.value == 0
    assert parent.settlement.allowance_charges == ()

    settlement = result.transaction.settlement
    allowance, charge = settlement.allowance_charges
    assert allowance.actual_amount.value == Decimal("5")
    assert allowance.calculation_percent is None
    assert allowance.category_trade_tax.category_code == "S"
    assert charge.actual_amount.value == Decimal("2")

    summation = settlement.monetary_summation
    assert summation.allowance_total.value == Decimal("5")
    assert summation.charge_total.value == Decimal("2")
    assert summation.line_total.value == Decimal("103")
    assert summation.grand_total.value == Decimal("111.2")


def test_credit_note_matches_invoice_line_shape():
    invoice = convert_document(_read("ubl_invoice_simple.xml"), ErrorList())
    credit_note_doc = _read("ubl_creditnote_simple.xml")
    assert credit_note_doc.variant is DocumentVariant.CREDIT_NOTE
    credit_note = convert_document(credit_note_doc, ErrorList())

    assert credit_note.transaction.line_items == invoice.transaction.line_items
    assert credit_note.document.type_code == "381"
