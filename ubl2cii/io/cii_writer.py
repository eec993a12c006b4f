from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Iterable

from lxml import etree as LET

from ubl2cii.constants import PRETTY_PRINT
from ubl2cii.model import cii
from ubl2cii.parsing.codes import CiiNs
from ubl2cii.parsing.money import format_decimal

__all__ = ["build_tree", "to_bytes", "write_cii"]


log = logging.getLogger(__name__)

NSMAP = {
    "rsm": CiiNs.RSM.value,
    "ram": CiiNs.RAM.value,
    "udt": CiiNs.UDT.value,
    "qdt": CiiNs.QDT.value,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _qn(tag: str) -> str:
    prefix, local = tag.split(":", 1)
    return f"{{{NSMAP[prefix]}}}{local}"


def _sub(parent: LET._Element, tag: str, text: str | None = None, **attrs) -> LET._Element:
    el = LET.SubElement(parent, _qn(tag))
    if text is not None:
        el.text = text
    for key, value in attrs.items():
        if value is not None:
            el.set(key, value)
    return el


def _opt_text(parent: LET._Element, tag: str, value: str | None) -> None:
    if value is not None:
        _sub(parent, tag, value)


def _text(parent: LET._Element, tag: str, value: cii.Text | None) -> None:
    if value is None or value.value is None:
        return
    _sub(
        parent,
        tag,
        value.value,
        languageID=value.language_id,
        languageLocaleID=value.language_locale_id,
    )


def _id(parent: LET._Element, tag: str, value: cii.ID | None) -> None:
    if value is None or value.value is None:
        return
    _sub(parent, tag, value.value, schemeID=value.scheme_id)


def _amount(parent: LET._Element, tag: str, amount: cii.Amount | None) -> None:
    if amount is None:
        return
    _sub(parent, tag, format_decimal(amount.value), currencyID=amount.currency_id)


def _date_time(parent: LET._Element, tag: str, value: cii.DateTime | None) -> None:
    if value is None:
        return
    holder = _sub(parent, tag)
    _sub(holder, "udt:DateTimeString", value.value, format=value.format)


def _formatted_date_time(parent: LET._Element, tag: str, value: cii.DateTime | None) -> None:
    if value is None:
        return
    holder = _sub(parent, tag)
    _sub(holder, "qdt:DateTimeString", value.value, format=value.format)


def _notes(parent: LET._Element, notes: Iterable[str]) -> None:
    for note in notes:
        _sub(_sub(parent, "ram:IncludedNote"), "ram:Content", note)


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


def _address(parent: LET._Element, tag: str, address: cii.TradeAddress | None) -> None:
    if address is None:
        return
    el = _sub(parent, tag)
    _opt_text(el, "ram:PostcodeCode", address.postcode)
    _opt_text(el, "ram:LineOne", address.line_one)
    _opt_text(el, "ram:LineTwo", address.line_two)
    _opt_text(el, "ram:LineThree", address.line_three)
    _opt_text(el, "ram:CityName", address.city_name)
    _opt_text(el, "ram:CountryID", address.country_id)
    for name in address.country_subdivision_names:
        _text(el, "ram:CountrySubDivisionName", name)


def _contact(parent: LET._Element, contact: cii.TradeContact) -> None:
    el = _sub(parent, "ram:DefinedTradeContact")
    _opt_text(el, "ram:PersonName", contact.person_name)
    _opt_text(el, "ram:DepartmentName", contact.department_name)
    if contact.telephone is not None and contact.telephone.complete_number is not None:
        tel = _sub(el, "ram:TelephoneUniversalCommunication")
        _sub(tel, "ram:CompleteNumber", contact.telephone.complete_number)
    if contact.email is not None and contact.email.uri_id is not None:
        mail = _sub(el, "ram:EmailURIUniversalCommunication")
        _id(mail, "ram:URIID", contact.email.uri_id)


def _party(parent: LET._Element, tag: str, party: cii.TradeParty | None) -> None:
    if party is None:
        return
    el = _sub(parent, tag)
    for pid in party.ids:
        _id(el, "ram:ID", pid)
    _opt_text(el, "ram:Name", party.name)
    org = party.legal_organization
    if org is not None:
        org_el = _sub(el, "ram:SpecifiedLegalOrganization")
        _id(org_el, "ram:ID", org.id)
        _opt_text(org_el, "ram:TradingBusinessName", org.trading_business_name)
        _address(org_el, "ram:PostalTradeAddress", org.postal_address)
    for contact in party.contacts:
        _contact(el, contact)
    _address(el, "ram:PostalTradeAddress", party.postal_address)
    for uc in party.uri_communications:
        uc_el = _sub(el, "ram:URIUniversalCommunication")
        _id(uc_el, "ram:URIID", uc.uri_id)
    for reg in party.tax_registrations:
        _id(_sub(el, "ram:SpecifiedTaxRegistration"), "ram:ID", reg.id)


def _trade_tax(parent: LET._Element, tag: str, tax: cii.TradeTax) -> None:
    el = _sub(parent, tag)
    _amount(el, "ram:CalculatedAmount", tax.calculated_amount)
    _opt_text(el, "ram:TypeCode", tax.type_code)
    _opt_text(el, "ram:ExemptionReason", tax.exemption_reason)
    _amount(el, "ram:BasisAmount", tax.basis_amount)
    _opt_text(el, "ram:CategoryCode", tax.category_code)
    _opt_text(el, "ram:ExemptionReasonCode", tax.exemption_reason_code)
    if tax.rate_percent is not None:
        _sub(el, "ram:RateApplicablePercent", format_decimal(tax.rate_percent))


def _allowance_charge(parent: LET._Element, ac: cii.TradeAllowanceCharge) -> None:
    el = _sub(parent, "ram:SpecifiedTradeAllowanceCharge")
    indicator = _sub(el, "ram:ChargeIndicator")
    _sub(indicator, "udt:Indicator", "true" if ac.charge_indicator else "false")
    if ac.calculation_percent is not None:
        _sub(el, "ram:CalculationPercent", format_decimal(ac.calculation_percent))
    if ac.basis_amount is not None:
        _sub(el, "ram:BasisAmount", format_decimal(ac.basis_amount))
    _amount(el, "ram:ActualAmount", ac.actual_amount)
    _opt_text(el, "ram:ReasonCode", ac.reason_code)
    _opt_text(el, "ram:Reason", ac.reason)
    if ac.category_trade_tax is not None:
        _trade_tax(el, "ram:CategoryTradeTax", ac.category_trade_tax)


def _referenced_document(
    parent: LET._Element, tag: str, doc: cii.ReferencedDocument | None
) -> None:
    if doc is None:
        return
    el = _sub(parent, tag)
    _opt_text(el, "ram:IssuerAssignedID", doc.issuer_assigned_id)
    _opt_text(el, "ram:URIID", doc.uri_id)
    _opt_text(el, "ram:LineID", doc.line_id)
    _opt_text(el, "ram:TypeCode", doc.type_code)
    for name in doc.names:
        _text(el, "ram:Name", name)
    for obj in doc.attachments:
        _sub(
            el,
            "ram:AttachmentBinaryObject",
            obj.value,
            mimeCode=obj.mime_code,
            filename=obj.filename,
        )
    _formatted_date_time(el, "ram:FormattedIssueDateTime", doc.formatted_issue_date)


def _line_item(parent: LET._Element, item: cii.TradeLineItem) -> None:
    el = _sub(parent, "ram:IncludedSupplyChainTradeLineItem")

    doc = _sub(el, "ram:AssociatedDocumentLineDocument")
    _opt_text(doc, "ram:LineID", item.document.line_id)
    _opt_text(doc, "ram:ParentLineID", item.document.parent_line_id)
    _notes(doc, item.document.notes)

    product = item.product
    prod = _sub(el, "ram:SpecifiedTradeProduct")
    _id(prod, "ram:GlobalID", product.global_id)
    _opt_text(prod, "ram:SellerAssignedID", product.seller_assigned_id)
    _text(prod, "ram:Name", product.name)
    _opt_text(prod, "ram:Description", product.description)
    for pc in product.characteristics:
        pc_el = _sub(prod, "ram:ApplicableProductCharacteristic")
        _text(pc_el, "ram:Description", pc.description)
        _text(pc_el, "ram:Value", pc.value)
    for cls in product.classifications:
        cls_el = _sub(prod, "ram:DesignatedProductClassification")
        _sub(cls_el, "ram:ClassCode", cls.class_code, listID=cls.list_id)

    agreement = _sub(el, "ram:SpecifiedLineTradeAgreement")
    _referenced_document(
        agreement, "ram:BuyerOrderReferencedDocument", item.agreement.buyer_order_reference
    )
    if item.agreement.net_price is not None:
        price = _sub(agreement, "ram:NetPriceProductTradePrice")
        _amount(price, "ram:ChargeAmount", item.agreement.net_price)

    delivery = _sub(el, "ram:SpecifiedLineTradeDelivery")
    qty = item.delivery.billed_quantity
    if qty is not None and qty.value is not None:
        _sub(delivery, "ram:BilledQuantity", format_decimal(qty.value), unitCode=qty.unit_code)

    settlement = _sub(el, "ram:SpecifiedLineTradeSettlement")
    for tax in item.settlement.taxes:
        _trade_tax(settlement, "ram:ApplicableTradeTax", tax)
    for ac in item.settlement.allowance_charges:
        _allowance_charge(settlement, ac)
    summation = _sub(settlement, "ram:SpecifiedTradeSettlementLineMonetarySummation")
    _amount(summation, "ram:LineTotalAmount", item.settlement.monetary_summation.line_total)
    if item.settlement.accounting_account is not None:
        acc = _sub(settlement, "ram:ReceivableSpecifiedTradeAccountingAccount")
        _sub(acc, "ram:ID", item.settlement.accounting_account)


def _agreement(parent: LET._Element, agreement: cii.HeaderTradeAgreement) -> None:
    el = _sub(parent, "ram:ApplicableHeaderTradeAgreement")
    _opt_text(el, "ram:BuyerReference", agreement.buyer_reference)
    _party(el, "ram:SellerTradeParty", agreement.seller)
    _party(el, "ram:BuyerTradeParty", agreement.buyer)
    _referenced_document(el, "ram:BuyerOrderReferencedDocument", agreement.buyer_order_reference)
    _referenced_document(el, "ram:ContractReferencedDocument", agreement.contract_reference)
    for ref in agreement.additional_references:
        _referenced_document(el, "ram:AdditionalReferencedDocument", ref)


def _delivery(parent: LET._Element, delivery: cii.HeaderTradeDelivery) -> None:
    el = _sub(parent, "ram:ApplicableHeaderTradeDelivery")
    _party(el, "ram:ShipToTradeParty", delivery.ship_to)
    if delivery.actual_delivery_date is not None:
        event = _sub(el, "ram:ActualDeliverySupplyChainEvent")
        _date_time(event, "ram:OccurrenceDateTime", delivery.actual_delivery_date)


def _monetary_summation(parent: LET._Element, summation: cii.MonetarySummation) -> None:
    el = _sub(parent, "ram:SpecifiedTradeSettlementHeaderMonetarySummation")
    _amount(el, "ram:LineTotalAmount", summation.line_total)
    _amount(el, "ram:ChargeTotalAmount", summation.charge_total)
    _amount(el, "ram:AllowanceTotalAmount", summation.allowance_total)
    _amount(el, "ram:TaxBasisTotalAmount", summation.tax_basis_total)
    _amount(el, "ram:TaxTotalAmount", summation.tax_total)
    _amount(el, "ram:RoundingAmount", summation.rounding)
    _amount(el, "ram:GrandTotalAmount", summation.grand_total)
    _amount(el, "ram:TotalPrepaidAmount", summation.prepaid_total)
    _amount(el, "ram:DuePayableAmount", summation.due_payable)


def _settlement(parent: LET._Element, settlement: cii.HeaderTradeSettlement) -> None:
    el = _sub(parent, "ram:ApplicableHeaderTradeSettlement")
    for ref in settlement.payment_references:
        _text(el, "ram:PaymentReference", ref)
    _opt_text(el, "ram:InvoiceCurrencyCode", settlement.currency_code)
    _party(el, "ram:PayeeTradeParty", settlement.payee)
    for means in settlement.payment_means:
        pm = _sub(el, "ram:SpecifiedTradeSettlementPaymentMeans")
        _opt_text(pm, "ram:TypeCode", means.type_code)
        if means.iban_id is not None:
            account = _sub(pm, "ram:PayeePartyCreditorFinancialAccount")
            _sub(account, "ram:IBANID", means.iban_id)
    for tax in settlement.taxes:
        _trade_tax(el, "ram:ApplicableTradeTax", tax)
    if settlement.billing_period is not None:
        period = _sub(el, "ram:BillingSpecifiedPeriod")
        _date_time(period, "ram:StartDateTime", settlement.billing_period.start)
        _date_time(period, "ram:EndDateTime", settlement.billing_period.end)
    for ac in settlement.allowance_charges:
        _allowance_charge(el, ac)
    for terms in settlement.payment_terms:
        pt = _sub(el, "ram:SpecifiedTradePaymentTerms")
        for desc in terms.descriptions:
            _text(pt, "ram:Description", desc)
        _date_time(pt, "ram:DueDateDateTime", terms.due_date)
    _monetary_summation(el, settlement.monetary_summation)
    if settlement.accounting_account is not None:
        acc = _sub(el, "ram:ReceivableSpecifiedTradeAccountingAccount")
        _sub(acc, "ram:ID", settlement.accounting_account)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_tree(invoice: cii.CrossIndustryInvoice) -> LET._Element:
    """Return the ``rsm:CrossIndustryInvoice`` element for ``invoice``."""
    root = LET.Element(_qn("rsm:CrossIndustryInvoice"), nsmap=NSMAP)

    context = _sub(root, "rsm:ExchangedDocumentContext")
    if invoice.context.business_process_id is not None:
        bp = _sub(context, "ram:BusinessProcessSpecifiedDocumentContextParameter")
        _sub(bp, "ram:ID", invoice.context.business_process_id)
    if invoice.context.guideline_id is not None:
        gl = _sub(context, "ram:GuidelineSpecifiedDocumentContextParameter")
        _sub(gl, "ram:ID", invoice.context.guideline_id)

    document = _sub(root, "rsm:ExchangedDocument")
    _opt_text(document, "ram:ID", invoice.document.id)
    _opt_text(document, "ram:TypeCode", invoice.document.type_code)
    _date_time(document, "ram:IssueDateTime", invoice.document.issue_date)
    _notes(document, invoice.document.notes)

    transaction = _sub(root, "rsm:SupplyChainTradeTransaction")
    for item in invoice.transaction.line_items:
        _line_item(transaction, item)
    _agreement(transaction, invoice.transaction.agreement)
    _delivery(transaction, invoice.transaction.delivery)
    _settlement(transaction, invoice.transaction.settlement)
    return root


def to_bytes(invoice: cii.CrossIndustryInvoice, pretty_print: bool = PRETTY_PRINT) -> bytes:
    """Serialize ``invoice`` as UTF-8 XML with declaration."""
    return LET.tostring(
        build_tree(invoice),
        xml_declaration=True,
        encoding="UTF-8",
        pretty_print=pretty_print,
    )


def write_cii(
    invoice: cii.CrossIndustryInvoice,
    target: str | Path | IO[bytes],
    pretty_print: bool = PRETTY_PRINT,
) -> None:
    """Write ``invoice`` to a file path or a binary stream.

    Raises :class:`OSError` when the target cannot be written.
    """
    data = to_bytes(invoice, pretty_print=pretty_print)
    if isinstance(target, (str, Path)):
        Path(target).write_bytes(data)
        log.debug("Wrote CII file %s (%d bytes)", target, len(data))
    else:
        target.write(data)
