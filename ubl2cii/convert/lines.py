# File: ubl2cii/convert/lines.py
"""Invoice / credit-note lines → ``ram:IncludedSupplyChainTradeLineItem``.

CII has no nested lines.  A line with sub-lines becomes one item of its
own followed by the items of its sub-lines (pre-order), and every
sub-line item points back to its immediate parent through
``ParentLineID``.  The parent item keeps no money of its own: its
line-extension amount and net price become ``0`` and its allowances and
charges are moved to the document level by
:mod:`ubl2cii.convert.aggregate`.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, List

from ubl2cii.constants import TRACE
from ubl2cii.model import cii, ubl
from .primitives import (
    convert_allowance_charge,
    convert_amount,
    convert_id,
    convert_tax_category,
    convert_text,
    text_or_none,
)

log = logging.getLogger(__name__)

ZERO = Decimal("0")


def _t(msg, *args):
    if TRACE:
        log.warning("[TRACE LINE] " + msg, *args)


def _convert_product(item: ubl.Item | None) -> cii.TradeProduct:
    if item is None:
        return cii.TradeProduct()
    return cii.TradeProduct(
        global_id=convert_id(item.standard_id),
        seller_assigned_id=item.sellers_id,
        name=convert_text(item.name),
        description=item.descriptions[0] if item.descriptions else None,
        characteristics=tuple(
            cii.ProductCharacteristic(
                description=convert_text(prop.name),
                value=convert_text(prop.value),
            )
            for prop in item.properties
        ),
        classifications=tuple(
            cii.ProductClassification(
                class_code=text_or_none(cc.code),
                list_id=text_or_none(cc.list_id),
            )
            for cc in item.classifications
        ),
    )


def _convert_quantity(quantity: ubl.Quantity | None) -> cii.Quantity | None:
    if quantity is None:
        return None
    return cii.Quantity(value=quantity.value, unit_code=quantity.unit_code)


def _zeroed(amount: ubl.Amount | None) -> ubl.Amount:
    return ubl.Amount(
        value=ZERO, currency_id=amount.currency_id if amount is not None else None
    )


def _build_item(line: ubl.SourceLine, parent_line_id: str | None) -> cii.TradeLineItem:
    price_amount = line.price_amount
    line_extension_amount = line.line_extension_amount
    allowance_charges: Iterable[ubl.AllowanceCharge] = line.allowance_charges
    if line.has_sub_lines:
        # Amounts live on the sub-lines, allowances go to the header
        price_amount = _zeroed(price_amount) if price_amount is not None else None
        line_extension_amount = _zeroed(line_extension_amount)
        allowance_charges = ()

    buyer_order_reference = None
    if line.order_line_id is not None:
        buyer_order_reference = cii.ReferencedDocument(line_id=line.order_line_id)

    item = line.item or ubl.Item()
    return cii.TradeLineItem(
        document=cii.LineDocument(
            line_id=line.id,
            parent_line_id=parent_line_id,
            notes=line.notes,
        ),
        product=_convert_product(line.item),
        agreement=cii.LineTradeAgreement(
            buyer_order_reference=buyer_order_reference,
            net_price=convert_amount(price_amount),
        ),
        delivery=cii.LineTradeDelivery(
            billed_quantity=_convert_quantity(line.quantity),
        ),
        settlement=cii.LineTradeSettlement(
            taxes=tuple(convert_tax_category(tc) for tc in item.tax_categories),
            allowance_charges=tuple(
                convert_allowance_charge(ac) for ac in allowance_charges
            ),
            monetary_summation=cii.LineMonetarySummation(
                line_total=convert_amount(line_extension_amount),
            ),
            accounting_account=line.accounting_cost,
        ),
    )


def convert_line(
    line: ubl.SourceLine, parent_line_id: str | None = None
) -> List[cii.TradeLineItem]:
    """Convert ``line`` and all of its sub-lines into a flat list of items.

    The first element is the item of ``line`` itself; the items of each
    sub-line follow in document order, every sub-line fully expanded before
    its next sibling.
    """
    _t("line %s (parent=%s, sub-lines=%d)", line.id, parent_line_id, len(line.sub_lines))
    ret = [_build_item(line, parent_line_id)]
    for sub_line in line.sub_lines:
        ret.extend(convert_line(sub_line, line.id))
    return ret


def convert_lines(lines: Iterable[ubl.SourceLine]) -> List[cii.TradeLineItem]:
    """Flatten all top-level document lines."""
    ret: List[cii.TradeLineItem] = []
    for line in lines:
        ret.extend(convert_line(line))
    return ret


def count_lines(lines: Iterable[ubl.SourceLine]) -> int:
    """Number of lines including all nested sub-lines."""
    return sum(1 + count_lines(line.sub_lines) for line in lines)
