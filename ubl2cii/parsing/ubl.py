# File: ubl2cii/parsing/ubl.py
# -*- coding: utf-8 -*-
"""
UBL 2.1 Invoice / CreditNote reader
===================================
• read_document()   → SourceDocument (or ``None`` with errors collected)
• parse_document()  → SourceDocument from an already parsed root element
• root_variant()    → DocumentVariant of a root element (or ``None``)
• screen_xml()      → raw bytes + defusedxml root, refusing entity declarations

Invoices and credit notes share one reader; the few element names that
differ between the two are looked up in ``ALIASES``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import IO, Any, Dict, List, Optional
from xml.etree.ElementTree import Element

from defusedxml import ElementTree as DET
from defusedxml.common import DefusedXmlException
from lxml import etree as LET

from ubl2cii.errors import ErrorList
from ubl2cii.model import ubl
from ubl2cii.model.ubl import DocumentVariant
from .codes import UblNs
from .money import parse_decimal
from .utils import parse_iso_date

log = logging.getLogger(__name__)

NS = {"cac": UblNs.CAC.value, "cbc": UblNs.CBC.value}

XML_PARSER = LET.XMLParser(resolve_entities=False, no_network=True)


class UBLParseError(ValueError):
    """Raised for values that cannot be read (bad numbers, dates ...)."""


@dataclass(frozen=True)
class VariantAliases:
    """Element names that differ between invoices and credit notes."""

    line: str
    sub_line: str
    quantity: str
    type_code: str


ALIASES: Dict[DocumentVariant, VariantAliases] = {
    DocumentVariant.INVOICE: VariantAliases(
        line="InvoiceLine",
        sub_line="SubInvoiceLine",
        quantity="InvoicedQuantity",
        type_code="InvoiceTypeCode",
    ),
    DocumentVariant.CREDIT_NOTE: VariantAliases(
        line="CreditNoteLine",
        sub_line="SubCreditNoteLine",
        quantity="CreditedQuantity",
        type_code="CreditNoteTypeCode",
    ),
}


# ────────────────────────── helpers ──────────────────────────
def _local_name(el: LET._Element) -> str:
    return LET.QName(el).localname


def _text(el: LET._Element | None) -> str | None:
    if el is None or el.text is None:
        return None
    txt = el.text.strip()
    return txt or None


def _find(el: LET._Element | None, path: str) -> LET._Element | None:
    if el is None:
        return None
    return el.find(path, NS)


def _findall(el: LET._Element | None, path: str) -> List[LET._Element]:
    if el is None:
        return []
    return el.findall(path, NS)


def _ctext(el: LET._Element | None, path: str) -> str | None:
    return _text(_find(el, path))


def _texts(el: LET._Element | None, path: str) -> tuple[str, ...]:
    return tuple(t for t in (_text(n) for n in _findall(el, path)) if t is not None)


def _decimal(el: LET._Element | None) -> Decimal | None:
    txt = _text(el)
    if txt is None:
        return None
    try:
        return parse_decimal(txt)
    except ValueError as exc:
        raise UBLParseError(f"{_local_name(el)}: {exc}") from exc


def _date(el: LET._Element | None) -> date | None:
    txt = _text(el)
    if txt is None:
        return None
    try:
        return parse_iso_date(txt)
    except ValueError as exc:
        raise UBLParseError(f"{_local_name(el)}: {exc}") from exc


def _bool(el: LET._Element | None) -> bool:
    return (_text(el) or "").lower() in {"true", "1"}


def _amount(el: LET._Element | None) -> ubl.Amount | None:
    value = _decimal(el)
    if value is None:
        return None
    return ubl.Amount(value=value, currency_id=el.get("currencyID"))


def _identifier(el: LET._Element | None) -> ubl.Identifier | None:
    value = _text(el)
    if value is None:
        return None
    return ubl.Identifier(value=value, scheme_id=el.get("schemeID"))


def _language_text(el: LET._Element) -> ubl.Text:
    return ubl.Text(
        value=el.text or "",
        language_id=el.get("languageID"),
        language_locale_id=el.get("languageLocaleID"),
    )


# ────────────────────────── aggregates ──────────────────────────
def _address(el: LET._Element | None) -> ubl.Address | None:
    if el is None:
        return None
    return ubl.Address(
        street_name=_ctext(el, "cbc:StreetName"),
        additional_street_name=_ctext(el, "cbc:AdditionalStreetName"),
        address_lines=_texts(el, "cac:AddressLine/cbc:Line"),
        city_name=_ctext(el, "cbc:CityName"),
        postal_zone=_ctext(el, "cbc:PostalZone"),
        country_subentity=_ctext(el, "cbc:CountrySubentity"),
        country_code=_ctext(el, "cac:Country/cbc:IdentificationCode"),
    )


def _tax_category(el: LET._Element) -> ubl.TaxCategory:
    return ubl.TaxCategory(
        id=_ctext(el, "cbc:ID"),
        percent=_decimal(_find(el, "cbc:Percent")),
        tax_scheme_id=_ctext(el, "cac:TaxScheme/cbc:ID"),
        exemption_reasons=_texts(el, "cbc:TaxExemptionReason"),
        exemption_reason_code=_ctext(el, "cbc:TaxExemptionReasonCode"),
    )


def _tax_total(el: LET._Element) -> ubl.TaxTotal:
    subtotals = []
    for sub in _findall(el, "cac:TaxSubtotal"):
        cat_el = _find(sub, "cac:TaxCategory")
        subtotals.append(
            ubl.TaxSubtotal(
                taxable_amount=_amount(_find(sub, "cbc:TaxableAmount")),
                tax_amount=_amount(_find(sub, "cbc:TaxAmount")),
                tax_category=_tax_category(cat_el) if cat_el is not None else None,
            )
        )
    return ubl.TaxTotal(
        tax_amount=_amount(_find(el, "cbc:TaxAmount")),
        subtotals=tuple(subtotals),
    )


def _allowance_charge(el: LET._Element) -> ubl.AllowanceCharge:
    return ubl.AllowanceCharge(
        charge_indicator=_bool(_find(el, "cbc:ChargeIndicator")),
        amount=_amount(_find(el, "cbc:Amount")),
        reason_code=_ctext(el, "cbc:AllowanceChargeReasonCode"),
        reasons=_texts(el, "cbc:AllowanceChargeReason"),
        multiplier_factor=_decimal(_find(el, "cbc:MultiplierFactorNumeric")),
        base_amount=_amount(_find(el, "cbc:BaseAmount")),
        tax_categories=tuple(_tax_category(c) for c in _findall(el, "cac:TaxCategory")),
    )


def _contact(el: LET._Element | None) -> ubl.Contact | None:
    if el is None:
        return None
    return ubl.Contact(
        name=_ctext(el, "cbc:Name"),
        telephone=_ctext(el, "cbc:Telephone"),
        electronic_mail=_ctext(el, "cbc:ElectronicMail"),
    )


def _person(el: LET._Element) -> ubl.Person:
    return ubl.Person(
        first_name=_ctext(el, "cbc:FirstName"),
        middle_name=_ctext(el, "cbc:MiddleName"),
        family_name=_ctext(el, "cbc:FamilyName"),
        name_suffix=_ctext(el, "cbc:NameSuffix"),
        department=_ctext(el, "cbc:OrganizationDepartment"),
        contact=_contact(_find(el, "cac:Contact")),
    )


def _party(el: LET._Element | None) -> ubl.Party | None:
    if el is None:
        return None
    legal_entities = tuple(
        ubl.LegalEntity(
            registration_name=_ctext(le, "cbc:RegistrationName"),
            company_id=_identifier(_find(le, "cbc:CompanyID")),
            registration_address=_address(_find(le, "cac:RegistrationAddress")),
        )
        for le in _findall(el, "cac:PartyLegalEntity")
    )
    tax_schemes = tuple(
        ubl.PartyTaxScheme(
            company_id=_identifier(_find(pts, "cbc:CompanyID")),
            tax_scheme_id=_ctext(pts, "cac:TaxScheme/cbc:ID"),
        )
        for pts in _findall(el, "cac:PartyTaxScheme")
    )
    return ubl.Party(
        identifiers=tuple(
            i
            for i in (
                _identifier(e) for e in _findall(el, "cac:PartyIdentification/cbc:ID")
            )
            if i is not None
        ),
        name=_ctext(el, "cac:PartyName/cbc:Name"),
        legal_entities=legal_entities,
        postal_address=_address(_find(el, "cac:PostalAddress")),
        tax_schemes=tax_schemes,
        endpoint_id=_identifier(_find(el, "cbc:EndpointID")),
        persons=tuple(_person(p) for p in _findall(el, "cac:Person")),
        contact=_contact(_find(el, "cac:Contact")),
    )


def _item(el: LET._Element | None) -> ubl.Item | None:
    if el is None:
        return None
    classifications = []
    for cc in _findall(el, "cac:CommodityClassification/cbc:ItemClassificationCode"):
        classifications.append(
            ubl.CommodityClassification(code=_text(cc), list_id=cc.get("listID"))
        )
    return ubl.Item(
        name=_ctext(el, "cbc:Name"),
        descriptions=_texts(el, "cbc:Description"),
        standard_id=_identifier(_find(el, "cac:StandardItemIdentification/cbc:ID")),
        sellers_id=_ctext(el, "cac:SellersItemIdentification/cbc:ID"),
        properties=tuple(
            ubl.ItemProperty(
                name=_ctext(p, "cbc:Name"), value=_ctext(p, "cbc:Value")
            )
            for p in _findall(el, "cac:AdditionalItemProperty")
        ),
        classifications=tuple(classifications),
        tax_categories=tuple(
            _tax_category(c) for c in _findall(el, "cac:ClassifiedTaxCategory")
        ),
    )


def _quantity(el: LET._Element | None) -> ubl.Quantity | None:
    if el is None:
        return None
    return ubl.Quantity(value=_decimal(el), unit_code=el.get("unitCode"))


def _line(el: LET._Element, aliases: VariantAliases) -> ubl.SourceLine:
    return ubl.SourceLine(
        id=_ctext(el, "cbc:ID"),
        notes=_texts(el, "cbc:Note"),
        item=_item(_find(el, "cac:Item")),
        quantity=_quantity(_find(el, f"cbc:{aliases.quantity}")),
        price_amount=_amount(_find(el, "cac:Price/cbc:PriceAmount")),
        line_extension_amount=_amount(_find(el, "cbc:LineExtensionAmount")),
        accounting_cost=_ctext(el, "cbc:AccountingCost"),
        order_line_id=_ctext(el, "cac:OrderLineReference/cbc:LineID"),
        allowance_charges=tuple(
            _allowance_charge(ac) for ac in _findall(el, "cac:AllowanceCharge")
        ),
        sub_lines=tuple(
            _line(sub, aliases) for sub in _findall(el, f"cac:{aliases.sub_line}")
        ),
    )


def _document_reference(el: LET._Element) -> ubl.DocumentReference:
    embedded = None
    bin_el = _find(el, "cac:Attachment/cbc:EmbeddedDocumentBinaryObject")
    if bin_el is not None:
        embedded = ubl.BinaryObject(
            value="".join((bin_el.text or "").split()),
            mime_code=bin_el.get("mimeCode"),
            filename=bin_el.get("filename"),
        )
    return ubl.DocumentReference(
        id=_ctext(el, "cbc:ID"),
        type_code=_ctext(el, "cbc:DocumentTypeCode"),
        issue_date=_date(_find(el, "cbc:IssueDate")),
        descriptions=tuple(
            _language_text(d) for d in _findall(el, "cbc:DocumentDescription")
        ),
        external_uri=_ctext(el, "cac:Attachment/cac:ExternalReference/cbc:URI"),
        embedded_object=embedded,
    )


def _delivery(el: LET._Element | None) -> ubl.Delivery | None:
    if el is None:
        return None
    location = None
    loc_el = _find(el, "cac:DeliveryLocation")
    if loc_el is not None:
        location = ubl.Location(
            id=_identifier(_find(loc_el, "cbc:ID")),
            address=_address(_find(loc_el, "cac:Address")),
        )
    return ubl.Delivery(
        location=location,
        actual_delivery_date=_date(_find(el, "cbc:ActualDeliveryDate")),
    )


def _payment_means(el: LET._Element) -> ubl.PaymentMeans:
    return ubl.PaymentMeans(
        code=_ctext(el, "cbc:PaymentMeansCode"),
        payment_ids=_texts(el, "cbc:PaymentID"),
        payee_account_id=_ctext(el, "cac:PayeeFinancialAccount/cbc:ID"),
        due_date=_date(_find(el, "cbc:PaymentDueDate")),
    )


def _period(el: LET._Element | None) -> ubl.Period | None:
    if el is None:
        return None
    return ubl.Period(
        start_date=_date(_find(el, "cbc:StartDate")),
        end_date=_date(_find(el, "cbc:EndDate")),
    )


def _monetary_total(el: LET._Element | None) -> ubl.MonetaryTotal | None:
    if el is None:
        return None
    return ubl.MonetaryTotal(
        line_extension_amount=_amount(_find(el, "cbc:LineExtensionAmount")),
        tax_exclusive_amount=_amount(_find(el, "cbc:TaxExclusiveAmount")),
        tax_inclusive_amount=_amount(_find(el, "cbc:TaxInclusiveAmount")),
        allowance_total_amount=_amount(_find(el, "cbc:AllowanceTotalAmount")),
        charge_total_amount=_amount(_find(el, "cbc:ChargeTotalAmount")),
        prepaid_amount=_amount(_find(el, "cbc:PrepaidAmount")),
        payable_rounding_amount=_amount(_find(el, "cbc:PayableRoundingAmount")),
        payable_amount=_amount(_find(el, "cbc:PayableAmount")),
    )


# ────────────────────────── public API ──────────────────────────
def root_variant(root: LET._Element) -> Optional[DocumentVariant]:
    """Return the variant named by the root element, ``None`` if unsupported."""
    try:
        return DocumentVariant(_local_name(root))
    except ValueError:
        return None


def parse_document(root: LET._Element, variant: DocumentVariant) -> ubl.SourceDocument:
    """Build the source model from a parsed UBL root element.

    Raises :class:`UBLParseError` for malformed numeric or date values.
    """
    aliases = ALIASES[variant]
    supplier = _find(root, "cac:AccountingSupplierParty/cac:Party")
    customer = _find(root, "cac:AccountingCustomerParty/cac:Party")
    order_ref = _find(root, "cac:OrderReference")
    return ubl.SourceDocument(
        variant=variant,
        id=_ctext(root, "cbc:ID"),
        type_code=_ctext(root, f"cbc:{aliases.type_code}"),
        issue_date=_date(_find(root, "cbc:IssueDate")),
        currency_code=_ctext(root, "cbc:DocumentCurrencyCode"),
        customization_id=_ctext(root, "cbc:CustomizationID"),
        profile_id=_ctext(root, "cbc:ProfileID"),
        notes=_texts(root, "cbc:Note"),
        buyer_reference=_ctext(root, "cbc:BuyerReference"),
        accounting_cost=_ctext(root, "cbc:AccountingCost"),
        seller=_party(supplier),
        buyer=_party(customer),
        payee=_party(_find(root, "cac:PayeeParty")),
        order_reference_id=_ctext(order_ref, "cbc:ID"),
        contract_reference_id=_ctext(root, "cac:ContractDocumentReference/cbc:ID"),
        additional_references=tuple(
            _document_reference(r)
            for r in _findall(root, "cac:AdditionalDocumentReference")
        ),
        delivery=_delivery(_find(root, "cac:Delivery")),
        invoice_period=_period(_find(root, "cac:InvoicePeriod")),
        payment_means=tuple(_payment_means(pm) for pm in _findall(root, "cac:PaymentMeans")),
        payment_terms=tuple(
            ubl.PaymentTerms(notes=_texts(pt, "cbc:Note"))
            for pt in _findall(root, "cac:PaymentTerms")
        ),
        allowance_charges=tuple(
            _allowance_charge(ac) for ac in _findall(root, "cac:AllowanceCharge")
        ),
        tax_totals=tuple(_tax_total(tt) for tt in _findall(root, "cac:TaxTotal")),
        monetary_total=_monetary_total(_find(root, "cac:LegalMonetaryTotal")),
        lines=tuple(_line(line, aliases) for line in _findall(root, f"cac:{aliases.line}")),
    )


def _read_bytes(source: Any) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if isinstance(source, (str, Path)):
        return Path(source).read_bytes()
    return source.read()


def screen_xml(
    source: str | Path | bytes | IO[bytes], errors: ErrorList
) -> tuple[bytes, Element] | None:
    """Load ``source`` and pre-parse it with defusedxml.

    Documents declaring entities, DTDs or external references are refused
    here, before lxml ever sees them.  Returns the raw bytes and the
    defusedxml root element, or ``None`` with the failure collected.
    """
    try:
        data = _read_bytes(source)
    except OSError as exc:
        errors.add_error(f"Failed to read XML: {exc}")
        return None
    try:
        root = DET.fromstring(data)
    except DefusedXmlException as exc:
        errors.add_error(f"Refusing XML with forbidden constructs: {exc!r}")
        return None
    except DET.ParseError as exc:
        errors.add_error(f"Failed to parse XML: {exc}")
        return None
    return data, root


def parse_xml(data: bytes, errors: ErrorList) -> LET._Element | None:
    """Parse already screened bytes with lxml."""
    try:
        return LET.fromstring(data, parser=XML_PARSER)
    except LET.XMLSyntaxError as exc:
        log.debug("UBL parse failed: %s", exc)
        errors.add_error(f"Failed to parse XML: {exc}")
        return None


def read_document(
    source: str | Path | bytes | IO[bytes] | LET._Element,
    errors: ErrorList,
    variant: DocumentVariant | None = None,
) -> ubl.SourceDocument | None:
    """Read a UBL document into the source model.

    Paths, bytes and streams are screened with :func:`screen_xml` first;
    an lxml element is taken as already screened.  ``variant`` fixes the
    expected root element; without it the root element decides.  Every
    failure is added to ``errors`` and ``None`` is returned.
    """
    if isinstance(source, LET._ElementTree):
        source = source.getroot()
    if isinstance(source, LET._Element):
        root = source
    else:
        screened = screen_xml(source, errors)
        if screened is None:
            return None
        root = parse_xml(screened[0], errors)
        if root is None:
            return None

    found = root_variant(root)
    if found is None or (variant is not None and found is not variant):
        expected = variant.value if variant is not None else "Invoice or CreditNote"
        errors.add_error(
            f"Expected UBL {expected} but found root element {root.tag}"
        )
        return None

    try:
        document = parse_document(root, found)
    except UBLParseError as exc:
        errors.add_error(f"Invalid UBL {found.value}: {exc}")
        return None
    log.debug("Read UBL %s %s", found.value, document.id)
    return document
