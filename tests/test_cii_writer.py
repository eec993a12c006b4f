from decimal import Decimal
from pathlib import Path

from lxml import etree as LET

from ubl2cii.errors import ErrorList
from ubl2cii.helper import convert_invoice
from ubl2cii.io.cii_writer import NSMAP, build_tree, to_bytes
from ubl2cii.model import cii

HERE = Path(__file__).parent


def _tree(name: str = "ubl_invoice_simple.xml") -> LET._Element:
    invoice = convert_invoice(HERE / name, ErrorList())
    return build_tree(invoice)


def _text(root, path):
    return root.findtext(path, namespaces=NSMAP)


def _children(el):
    return [LET.QName(c).localname for c in el]


def test_root_and_namespaces():
    root = _tree()
    assert root.tag == f"{{{NSMAP['rsm']}}}CrossIndustryInvoice"
    assert _children(root) == [
        "ExchangedDocumentContext",
        "ExchangedDocument",
        "SupplyChainTradeTransaction",
    ]


def test_document_header():
    root = _tree()
    assert _text(root, "rsm:ExchangedDocument/ram:ID") == "INV-2024-001"
    date_el = root.find(
        "rsm:ExchangedDocument/ram:IssueDateTime/udt:DateTimeString", NSMAP
    )
    assert date_el.text == "20240315"
    assert date_el.get("format") == "102"
    assert _text(
        root,
        "rsm:ExchangedDocumentContext/ram:GuidelineSpecifiedDocumentContextParameter/ram:ID",
    ) == "urn:cen.eu:en16931:2017"


def test_monetary_summation_order_and_values():
    root = _tree()
    summation = root.find(
        "rsm:SupplyChainTradeTransaction/ram:ApplicableHeaderTradeSettlement/"
        "ram:SpecifiedTradeSettlementHeaderMonetarySummation",
        NSMAP,
    )
    assert _children(summation) == [
        "LineTotalAmount",
        "TaxBasisTotalAmount",
        "TaxTotalAmount",
        "GrandTotalAmount",
        "DuePayableAmount",
    ]
    tax_total = summation.find("ram:TaxTotalAmount", NSMAP)
    assert tax_total.text == "19"
    assert tax_total.get("currencyID") == "EUR"
    assert summation.find("ram:GrandTotalAmount", NSMAP).get("currencyID") is None
    assert _text(summation, "ram:GrandTotalAmount") == "119"


def test_transaction_order():
    root = _tree("ubl_invoice_sublines.xml")
    transaction = root.find("rsm:SupplyChainTradeTransaction", NSMAP)
    assert _children(transaction) == [
        "IncludedSupplyChainTradeLineItem",
        "IncludedSupplyChainTradeLineItem",
        "IncludedSupplyChainTradeLineItem",
        "ApplicableHeaderTradeAgreement",
        "ApplicableHeaderTradeDelivery",
        "ApplicableHeaderTradeSettlement",
    ]
    parents = transaction.findall(
        "ram:IncludedSupplyChainTradeLineItem/ram:AssociatedDocumentLineDocument/"
        "ram:ParentLineID",
        NSMAP,
    )
    assert [p.text for p in parents] == ["1", "1"]


def test_header_allowance_charge_elements():
    root = _tree("ubl_invoice_sublines.xml")
    acs = root.findall(
        "rsm:SupplyChainTradeTransaction/ram:ApplicableHeaderTradeSettlement/"
        "ram:SpecifiedTradeAllowanceCharge",
        NSMAP,
    )
    assert len(acs) == 2
    allowance = acs[0]
    assert _children(allowance) == [
        "ChargeIndicator",
        "ActualAmount",
        "ReasonCode",
        "Reason",
        "CategoryTradeTax",
    ]
    assert _text(allowance, "ram:ChargeIndicator/udt:Indicator") == "false"
    assert _text(allowance, "ram:CategoryTradeTax/ram:CategoryCode") == "S"
    assert _text(allowance, "ram:CategoryTradeTax/ram:RateApplicablePercent") == "19"
    assert _text(acs[1], "ram:ChargeIndicator/udt:Indicator") == "true"


def test_seller_party():
    root = _tree()
    seller = root.find(
        "rsm:SupplyChainTradeTransaction/ram:ApplicableHeaderTradeAgreement/"
        "ram:SellerTradeParty",
        NSMAP,
    )
    assert _children(seller) == [
        "ID",
        "Name",
        "SpecifiedLegalOrganization",
        "DefinedTradeContact",
        "PostalTradeAddress",
        "URIUniversalCommunication",
        "SpecifiedTaxRegistration",
    ]
    reg = seller.find("ram:SpecifiedTaxRegistration/ram:ID", NSMAP)
    assert reg.text == "DE123456789"
    assert reg.get("schemeID") == "VA"
    address = seller.find("ram:PostalTradeAddress", NSMAP)
    assert _children(address) == [
        "PostcodeCode",
        "LineOne",
        "LineTwo",
        "LineThree",
        "CityName",
        "CountryID",
        "CountrySubDivisionName",
    ]


def test_additional_reference_attachment():
    root = _tree()
    refs = root.findall(
        "rsm:SupplyChainTradeTransaction/ram:ApplicableHeaderTradeAgreement/"
        "ram:AdditionalReferencedDocument",
        NSMAP,
    )
    assert [_text(r, "ram:TypeCode") for r in refs] == ["50", "916"]
    obj = refs[1].find("ram:AttachmentBinaryObject", NSMAP)
    assert obj.get("mimeCode") == "text/csv"
    assert obj.get("filename") == "hours.csv"
    date_el = refs[1].find("ram:FormattedIssueDateTime/qdt:DateTimeString", NSMAP)
    assert date_el.text == "20240301"


def test_amounts_never_use_exponent():
    invoice = cii.CrossIndustryInvoice(
        context=cii.DocumentContext(),
        document=cii.ExchangedDocument(id="X"),
        transaction=cii.TradeTransaction(
            line_items=(),
            agreement=cii.HeaderTradeAgreement(),
            delivery=cii.HeaderTradeDelivery(),
            settlement=cii.HeaderTradeSettlement(
                monetary_summation=cii.MonetarySummation(
                    grand_total=cii.Amount(Decimal("1E+3")),
                ),
            ),
        ),
    )
    data = to_bytes(invoice, pretty_print=False)
    assert b"<ram:GrandTotalAmount>1000</ram:GrandTotalAmount>" in data
    assert data.startswith(b"<?xml version='1.0' encoding='UTF-8'?>")
