# File: ubl2cii/model/cii.py
"""Model of a CII D16B ``CrossIndustryInvoice``.

The tree is built bottom-up by :mod:`ubl2cii.convert` and handed to
:mod:`ubl2cii.io.cii_writer`.  All entities are frozen; the only place a
finished entity is "changed" is the settlement aggregation, which builds a
replacement with :func:`dataclasses.replace`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Tuple

from ubl2cii.constants import CII_DATE_FORMAT


@dataclass(frozen=True)
class Amount:
    value: Decimal
    currency_id: str | None = None


@dataclass(frozen=True)
class DateTime:
    """``udt:DateTimeString`` with its ``format`` qualifier."""

    value: str
    format: str = CII_DATE_FORMAT


@dataclass(frozen=True)
class ID:
    value: str | None
    scheme_id: str | None = None


@dataclass(frozen=True)
class Text:
    value: str | None
    language_id: str | None = None
    language_locale_id: str | None = None


@dataclass(frozen=True)
class Quantity:
    value: Decimal | None
    unit_code: str | None = None


@dataclass(frozen=True)
class TradeAddress:
    postcode: str | None = None
    line_one: str | None = None
    line_two: str | None = None
    line_three: str | None = None
    city_name: str | None = None
    country_id: str | None = None
    country_subdivision_names: Tuple[Text, ...] = ()


@dataclass(frozen=True)
class LegalOrganization:
    id: ID | None = None
    trading_business_name: str | None = None
    postal_address: TradeAddress | None = None


@dataclass(frozen=True)
class UniversalCommunication:
    uri_id: ID | None = None
    complete_number: str | None = None


@dataclass(frozen=True)
class TradeContact:
    person_name: str | None = None
    department_name: str | None = None
    telephone: UniversalCommunication | None = None
    email: UniversalCommunication | None = None


@dataclass(frozen=True)
class TaxRegistration:
    id: ID


@dataclass(frozen=True)
class TradeParty:
    ids: Tuple[ID, ...] = ()
    name: str | None = None
    legal_organization: LegalOrganization | None = None
    contacts: Tuple[TradeContact, ...] = ()
    postal_address: TradeAddress | None = None
    uri_communications: Tuple[UniversalCommunication, ...] = ()
    tax_registrations: Tuple[TaxRegistration, ...] = ()


@dataclass(frozen=True)
class TradeTax:
    calculated_amount: Amount | None = None
    type_code: str | None = None
    exemption_reason: str | None = None
    basis_amount: Amount | None = None
    category_code: str | None = None
    exemption_reason_code: str | None = None
    rate_percent: Decimal | None = None


@dataclass(frozen=True)
class TradeAllowanceCharge:
    charge_indicator: bool
    calculation_percent: Decimal | None = None
    basis_amount: Decimal | None = None
    actual_amount: Amount | None = None
    reason_code: str | None = None
    reason: str | None = None
    category_trade_tax: TradeTax | None = None


@dataclass(frozen=True)
class BinaryObject:
    value: str
    mime_code: str | None = None
    filename: str | None = None


@dataclass(frozen=True)
class ReferencedDocument:
    issuer_assigned_id: str | None = None
    uri_id: str | None = None
    line_id: str | None = None
    type_code: str | None = None
    names: Tuple[Text, ...] = ()
    attachments: Tuple[BinaryObject, ...] = ()
    formatted_issue_date: DateTime | None = None


@dataclass(frozen=True)
class ProductCharacteristic:
    description: Text | None = None
    value: Text | None = None


@dataclass(frozen=True)
class ProductClassification:
    class_code: str | None = None
    list_id: str | None = None


@dataclass(frozen=True)
class TradeProduct:
    global_id: ID | None = None
    seller_assigned_id: str | None = None
    name: Text | None = None
    description: str | None = None
    characteristics: Tuple[ProductCharacteristic, ...] = ()
    classifications: Tuple[ProductClassification, ...] = ()


@dataclass(frozen=True)
class LineDocument:
    """``ram:AssociatedDocumentLineDocument``.

    ``parent_line_id`` is set only on items produced from nested sub-lines
    and always names the immediate parent line.
    """

    line_id: str | None
    parent_line_id: str | None = None
    notes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LineTradeAgreement:
    buyer_order_reference: ReferencedDocument | None = None
    net_price: Amount | None = None


@dataclass(frozen=True)
class LineTradeDelivery:
    billed_quantity: Quantity | None = None


@dataclass(frozen=True)
class LineMonetarySummation:
    line_total: Amount | None = None


@dataclass(frozen=True)
class LineTradeSettlement:
    taxes: Tuple[TradeTax, ...] = ()
    allowance_charges: Tuple[TradeAllowanceCharge, ...] = ()
    monetary_summation: LineMonetarySummation = field(default_factory=LineMonetarySummation)
    accounting_account: str | None = None


@dataclass(frozen=True)
class TradeLineItem:
    document: LineDocument
    product: TradeProduct
    agreement: LineTradeAgreement
    delivery: LineTradeDelivery
    settlement: LineTradeSettlement


@dataclass(frozen=True)
class HeaderTradeAgreement:
    buyer_reference: str | None = None
    seller: TradeParty | None = None
    buyer: TradeParty | None = None
    buyer_order_reference: ReferencedDocument | None = None
    contract_reference: ReferencedDocument | None = None
    additional_references: Tuple[ReferencedDocument, ...] = ()


@dataclass(frozen=True)
class HeaderTradeDelivery:
    ship_to: TradeParty | None = None
    actual_delivery_date: DateTime | None = None


@dataclass(frozen=True)
class PaymentMeans:
    type_code: str | None = None
    iban_id: str | None = None


@dataclass(frozen=True)
class PaymentTerms:
    descriptions: Tuple[Text, ...] = ()
    due_date: DateTime | None = None


@dataclass(frozen=True)
class BillingPeriod:
    start: DateTime | None = None
    end: DateTime | None = None


@dataclass(frozen=True)
class MonetarySummation:
    line_total: Amount | None = None
    charge_total: Amount | None = None
    allowance_total: Amount | None = None
    tax_basis_total: Amount | None = None
    tax_total: Amount | None = None
    rounding: Amount | None = None
    grand_total: Amount | None = None
    prepaid_total: Amount | None = None
    due_payable: Amount | None = None


@dataclass(frozen=True)
class HeaderTradeSettlement:
    payment_references: Tuple[Text, ...] = ()
    currency_code: str | None = None
    payee: TradeParty | None = None
    payment_means: Tuple[PaymentMeans, ...] = ()
    taxes: Tuple[TradeTax, ...] = ()
    billing_period: BillingPeriod | None = None
    allowance_charges: Tuple[TradeAllowanceCharge, ...] = ()
    payment_terms: Tuple[PaymentTerms, ...] = ()
    monetary_summation: MonetarySummation = field(default_factory=MonetarySummation)
    accounting_account: str | None = None


@dataclass(frozen=True)
class DocumentContext:
    guideline_id: str | None = None
    business_process_id: str | None = None


@dataclass(frozen=True)
class ExchangedDocument:
    id: str | None = None
    type_code: str | None = None
    issue_date: DateTime | None = None
    notes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TradeTransaction:
    line_items: Tuple[TradeLineItem, ...]
    agreement: HeaderTradeAgreement
    delivery: HeaderTradeDelivery
    settlement: HeaderTradeSettlement


@dataclass(frozen=True)
class CrossIndustryInvoice:
    context: DocumentContext
    document: ExchangedDocument
    transaction: TradeTransaction
