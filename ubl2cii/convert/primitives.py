"""Conversion of atomic UBL values into their CII counterparts.

Every helper accepts ``None`` and returns ``None`` for it; none of them
raises for absent input.
"""

from __future__ import annotations

from datetime import date

from ubl2cii.constants import CII_DATE_FORMAT, TAX_REGISTRATION_SCHEME_MAP
from ubl2cii.model import cii, ubl
from ubl2cii.parsing.money import strip_trailing_zeros
from ubl2cii.parsing.utils import format_cii_date


def has_text(s: str | None) -> bool:
    return s is not None and s != ""


def text_or_none(s: str | None) -> str | None:
    """Return ``s`` unless it is empty."""
    return s if has_text(s) else None


def convert_amount(
    amount: ubl.Amount | None, with_currency: bool = False
) -> cii.Amount | None:
    """Copy the value without trailing zeros.

    The currency is only attached when ``with_currency`` is set; everywhere
    but the document tax total the invoice currency code applies.
    """
    if amount is None:
        return None
    return cii.Amount(
        value=strip_trailing_zeros(amount.value),
        currency_id=amount.currency_id if with_currency else None,
    )


def convert_date(value: date | None) -> cii.DateTime | None:
    if value is None:
        return None
    return cii.DateTime(value=format_cii_date(value), format=CII_DATE_FORMAT)


def convert_id(identifier: ubl.Identifier | None) -> cii.ID | None:
    if identifier is None:
        return None
    return cii.ID(value=identifier.value, scheme_id=identifier.scheme_id)


def convert_text(text: ubl.Text | str | None) -> cii.Text | None:
    if text is None:
        return None
    if isinstance(text, str):
        return cii.Text(value=text)
    return cii.Text(
        value=text.value,
        language_id=text_or_none(text.language_id),
        language_locale_id=text_or_none(text.language_locale_id),
    )


def convert_address(address: ubl.Address | None) -> cii.TradeAddress | None:
    """Map a UBL postal address; line three is the first ``cac:AddressLine``."""
    if address is None:
        return None
    line_three = address.address_lines[0] if address.address_lines else None
    subdivisions: tuple[cii.Text, ...] = ()
    if address.country_subentity is not None:
        subdivisions = (cii.Text(value=address.country_subentity),)
    return cii.TradeAddress(
        postcode=text_or_none(address.postal_zone),
        line_one=text_or_none(address.street_name),
        line_two=text_or_none(address.additional_street_name),
        line_three=text_or_none(line_three),
        city_name=text_or_none(address.city_name),
        country_id=text_or_none(address.country_code),
        country_subdivision_names=subdivisions,
    )


def tax_registration_scheme(scheme_id: str | None) -> str | None:
    """Return the CII registration scheme (``VAT`` becomes ``VA``)."""
    if scheme_id is None:
        return None
    return TAX_REGISTRATION_SCHEME_MAP.get(scheme_id, scheme_id)


def convert_tax_category(category: ubl.TaxCategory) -> cii.TradeTax:
    """Map a classified tax category to a ``ram:ApplicableTradeTax`` without amounts."""
    return cii.TradeTax(
        type_code=text_or_none(category.tax_scheme_id),
        category_code=text_or_none(category.id),
        rate_percent=category.percent,
    )


def convert_applicable_trade_tax(subtotal: ubl.TaxSubtotal) -> cii.TradeTax:
    """Map one ``cac:TaxSubtotal`` to a header ``ram:ApplicableTradeTax``."""
    category = subtotal.tax_category or ubl.TaxCategory()
    return cii.TradeTax(
        calculated_amount=convert_amount(subtotal.tax_amount),
        type_code=text_or_none(category.tax_scheme_id),
        exemption_reason=(
            text_or_none(category.exemption_reasons[0])
            if category.exemption_reasons
            else None
        ),
        basis_amount=convert_amount(subtotal.taxable_amount),
        category_code=text_or_none(category.id),
        exemption_reason_code=text_or_none(category.exemption_reason_code),
        rate_percent=category.percent,
    )


def convert_allowance_charge(
    allowance_charge: ubl.AllowanceCharge,
) -> cii.TradeAllowanceCharge:
    """Map a ``cac:AllowanceCharge``; only its first tax category is kept."""
    category_trade_tax = None
    if allowance_charge.tax_categories:
        category_trade_tax = convert_tax_category(allowance_charge.tax_categories[0])
    return cii.TradeAllowanceCharge(
        charge_indicator=allowance_charge.charge_indicator,
        calculation_percent=allowance_charge.multiplier_factor,
        basis_amount=(
            allowance_charge.base_amount.value
            if allowance_charge.base_amount is not None
            else None
        ),
        actual_amount=convert_amount(allowance_charge.amount),
        reason_code=text_or_none(allowance_charge.reason_code),
        reason=allowance_charge.reasons[0] if allowance_charge.reasons else None,
        category_trade_tax=category_trade_tax,
    )
