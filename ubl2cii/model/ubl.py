# File: ubl2cii/model/ubl.py
"""Read-only model of a UBL 2.1 Invoice / CreditNote.

Instances are produced by :mod:`ubl2cii.parsing.ubl` and never modified
afterwards; repeated children are stored as tuples.  Only the parts of the
UBL document that take part in the CII conversion are modelled.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Tuple


class DocumentVariant(str, Enum):
    """Root element local name of the supported UBL documents."""

    INVOICE = "Invoice"
    CREDIT_NOTE = "CreditNote"


@dataclass(frozen=True)
class Identifier:
    value: str | None
    scheme_id: str | None = None


@dataclass(frozen=True)
class Amount:
    value: Decimal
    currency_id: str | None = None


@dataclass(frozen=True)
class Quantity:
    value: Decimal | None
    unit_code: str | None = None


@dataclass(frozen=True)
class Text:
    value: str
    language_id: str | None = None
    language_locale_id: str | None = None


@dataclass(frozen=True)
class Address:
    street_name: str | None = None
    additional_street_name: str | None = None
    address_lines: Tuple[str, ...] = ()
    city_name: str | None = None
    postal_zone: str | None = None
    country_subentity: str | None = None
    country_code: str | None = None


@dataclass(frozen=True)
class TaxCategory:
    id: str | None = None
    percent: Decimal | None = None
    tax_scheme_id: str | None = None
    exemption_reasons: Tuple[str, ...] = ()
    exemption_reason_code: str | None = None


@dataclass(frozen=True)
class TaxSubtotal:
    taxable_amount: Amount | None = None
    tax_amount: Amount | None = None
    tax_category: TaxCategory | None = None


@dataclass(frozen=True)
class TaxTotal:
    tax_amount: Amount | None = None
    subtotals: Tuple[TaxSubtotal, ...] = ()


@dataclass(frozen=True)
class AllowanceCharge:
    """``cac:AllowanceCharge``; ``charge_indicator`` is ``True`` for charges."""

    charge_indicator: bool
    amount: Amount | None = None
    reason_code: str | None = None
    reasons: Tuple[str, ...] = ()
    multiplier_factor: Decimal | None = None
    base_amount: Amount | None = None
    tax_categories: Tuple[TaxCategory, ...] = ()


@dataclass(frozen=True)
class Contact:
    name: str | None = None
    telephone: str | None = None
    electronic_mail: str | None = None


@dataclass(frozen=True)
class Person:
    first_name: str | None = None
    middle_name: str | None = None
    family_name: str | None = None
    name_suffix: str | None = None
    department: str | None = None
    contact: Contact | None = None


@dataclass(frozen=True)
class LegalEntity:
    registration_name: str | None = None
    company_id: Identifier | None = None
    registration_address: Address | None = None


@dataclass(frozen=True)
class PartyTaxScheme:
    company_id: Identifier | None = None
    tax_scheme_id: str | None = None


@dataclass(frozen=True)
class Party:
    identifiers: Tuple[Identifier, ...] = ()
    name: str | None = None
    legal_entities: Tuple[LegalEntity, ...] = ()
    postal_address: Address | None = None
    tax_schemes: Tuple[PartyTaxScheme, ...] = ()
    endpoint_id: Identifier | None = None
    persons: Tuple[Person, ...] = ()
    contact: Contact | None = None


@dataclass(frozen=True)
class ItemProperty:
    name: str | None = None
    value: str | None = None


@dataclass(frozen=True)
class CommodityClassification:
    code: str | None = None
    list_id: str | None = None


@dataclass(frozen=True)
class Item:
    name: str | None = None
    descriptions: Tuple[str, ...] = ()
    standard_id: Identifier | None = None
    sellers_id: str | None = None
    properties: Tuple[ItemProperty, ...] = ()
    classifications: Tuple[CommodityClassification, ...] = ()
    tax_categories: Tuple[TaxCategory, ...] = ()


@dataclass(frozen=True)
class SourceLine:
    """Invoice or credit-note line, possibly carrying nested sub-lines."""

    id: str | None
    notes: Tuple[str, ...] = ()
    item: Item | None = None
    quantity: Quantity | None = None
    price_amount: Amount | None = None
    line_extension_amount: Amount | None = None
    accounting_cost: str | None = None
    order_line_id: str | None = None
    allowance_charges: Tuple[AllowanceCharge, ...] = ()
    sub_lines: Tuple["SourceLine", ...] = ()

    @property
    def has_sub_lines(self) -> bool:
        return bool(self.sub_lines)


@dataclass(frozen=True)
class BinaryObject:
    value: str
    mime_code: str | None = None
    filename: str | None = None


@dataclass(frozen=True)
class DocumentReference:
    id: str | None = None
    type_code: str | None = None
    issue_date: date | None = None
    descriptions: Tuple[Text, ...] = ()
    external_uri: str | None = None
    embedded_object: BinaryObject | None = None


@dataclass(frozen=True)
class Location:
    id: Identifier | None = None
    address: Address | None = None


@dataclass(frozen=True)
class Delivery:
    location: Location | None = None
    actual_delivery_date: date | None = None


@dataclass(frozen=True)
class PaymentMeans:
    code: str | None = None
    payment_ids: Tuple[str, ...] = ()
    payee_account_id: str | None = None
    due_date: date | None = None


@dataclass(frozen=True)
class PaymentTerms:
    notes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Period:
    start_date: date | None = None
    end_date: date | None = None


@dataclass(frozen=True)
class MonetaryTotal:
    line_extension_amount: Amount | None = None
    tax_exclusive_amount: Amount | None = None
    tax_inclusive_amount: Amount | None = None
    allowance_total_amount: Amount | None = None
    charge_total_amount: Amount | None = None
    prepaid_amount: Amount | None = None
    payable_rounding_amount: Amount | None = None
    payable_amount: Amount | None = None


@dataclass(frozen=True)
class SourceDocument:
    """Logical shape shared by UBL invoices and credit notes."""

    variant: DocumentVariant
    id: str | None = None
    type_code: str | None = None
    issue_date: date | None = None
    currency_code: str | None = None
    customization_id: str | None = None
    profile_id: str | None = None
    notes: Tuple[str, ...] = ()
    buyer_reference: str | None = None
    accounting_cost: str | None = None
    seller: Party | None = None
    buyer: Party | None = None
    payee: Party | None = None
    order_reference_id: str | None = None
    contract_reference_id: str | None = None
    additional_references: Tuple[DocumentReference, ...] = ()
    delivery: Delivery | None = None
    invoice_period: Period | None = None
    payment_means: Tuple[PaymentMeans, ...] = ()
    payment_terms: Tuple[PaymentTerms, ...] = ()
    allowance_charges: Tuple[AllowanceCharge, ...] = ()
    tax_totals: Tuple[TaxTotal, ...] = ()
    monetary_total: MonetaryTotal | None = None
    lines: Tuple[SourceLine, ...] = ()
