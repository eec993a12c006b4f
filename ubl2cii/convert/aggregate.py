# File: ubl2cii/convert/aggregate.py
"""Tax category aggregation and redistribution of parent-line allowances.

• tax_categories()                  → per (scheme, percent, category) tax sums
                                      plus the declared document tax total
• dominant_tax_category()           → bucket with the highest tax amount
• collect_parent_lines()            → every line that has sub-lines
• redistribute_parent_allowances()  → header allowances/charges synthesized
                                      from parent lines and the amended
                                      monetary summation
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Dict, Iterable, List, NamedTuple, Tuple

from ubl2cii.model import cii, ubl
from ubl2cii.parsing.money import exact_sum, sum_amounts
from .primitives import convert_allowance_charge, convert_amount

log = logging.getLogger(__name__)


class TaxCategoryKey(NamedTuple):
    """Bucket key of the tax category map."""

    scheme_id: str | None
    percent: Decimal | None
    type_code: str | None


def tax_categories(
    document: ubl.SourceDocument,
) -> Tuple[Dict[TaxCategoryKey, Decimal], Decimal]:
    """Sum subtotal tax amounts per category and the declared tax totals.

    Returns ``(categories, declared_total)``.  ``categories`` keeps the
    order in which keys first appear in the document.  Absent amounts count
    as zero.
    """
    categories: Dict[TaxCategoryKey, Decimal] = {}
    declared_total = Decimal("0")
    for tax_total in document.tax_totals:
        if tax_total.tax_amount is not None:
            declared_total = exact_sum((declared_total, tax_total.tax_amount.value))
        for subtotal in tax_total.subtotals:
            category = subtotal.tax_category or ubl.TaxCategory()
            key = TaxCategoryKey(
                scheme_id=category.tax_scheme_id,
                percent=category.percent,
                type_code=category.id,
            )
            amount = (
                subtotal.tax_amount.value
                if subtotal.tax_amount is not None
                else Decimal("0")
            )
            categories[key] = exact_sum((categories.get(key, Decimal("0")), amount))
    return categories, declared_total


def dominant_tax_category(
    categories: Dict[TaxCategoryKey, Decimal],
) -> TaxCategoryKey | None:
    """Return the key with the highest amount; ties keep the first key."""
    if not categories:
        return None
    best_key = None
    best_amount = None
    for key, amount in categories.items():
        if best_amount is None or amount > best_amount:
            best_key, best_amount = key, amount
    return best_key


def collect_parent_lines(lines: Iterable[ubl.SourceLine]) -> List[ubl.SourceLine]:
    """Return every line with sub-lines, at any depth, in document order."""
    ret: List[ubl.SourceLine] = []
    for line in lines:
        if line.has_sub_lines:
            ret.append(line)
            ret.extend(collect_parent_lines(line.sub_lines))
    return ret


@dataclass(frozen=True)
class ParentLineAdjustment:
    """Result of moving parent-line allowances/charges to the header."""

    allowance_charges: Tuple[cii.TradeAllowanceCharge, ...]
    monetary_summation: cii.MonetarySummation


def _header_allowance_charge(
    allowance_charge: ubl.AllowanceCharge, category: TaxCategoryKey | None
) -> ubl.AllowanceCharge:
    # A percentage basis does not survive the move to the header; only the
    # fixed amount is kept.
    tax_cats = allowance_charge.tax_categories
    if category is not None:
        tax_cats = (
            ubl.TaxCategory(
                id=category.type_code,
                percent=category.percent,
                tax_scheme_id=category.scheme_id,
            ),
        )
    return replace(
        allowance_charge,
        multiplier_factor=None,
        base_amount=None,
        tax_categories=tax_cats,
    )


def _collapse(amounts: List[cii.Amount]) -> cii.Amount:
    return cii.Amount(value=sum_amounts(a.value for a in amounts))


def redistribute_parent_allowances(
    document: ubl.SourceDocument, summation: cii.MonetarySummation
) -> ParentLineAdjustment:
    """Move allowances/charges of parent lines to the document level.

    Each allowance/charge of a parent line becomes a header
    ``ram:SpecifiedTradeAllowanceCharge`` taxed with the dominant document
    tax category.  The line total receives allowances with their own sign
    and charges negated; charge and allowance totals receive the plain
    amounts.  When at least one parent line exists the three fields are
    collapsed into single sums (an empty field sums to ``0``); every other
    field of ``summation`` is left untouched.  Without parent lines the
    input is returned unchanged.
    """
    parent_lines = collect_parent_lines(document.lines)
    if not parent_lines:
        return ParentLineAdjustment((), summation)

    categories, _ = tax_categories(document)
    category = dominant_tax_category(categories)

    line_totals = [summation.line_total] if summation.line_total is not None else []
    charge_totals = (
        [summation.charge_total] if summation.charge_total is not None else []
    )
    allowance_totals = (
        [summation.allowance_total] if summation.allowance_total is not None else []
    )

    header_allowances: List[cii.TradeAllowanceCharge] = []
    for line in parent_lines:
        for allowance_charge in line.allowance_charges:
            moved = _header_allowance_charge(allowance_charge, category)
            amount = convert_amount(moved.amount)
            if amount is not None:
                if moved.charge_indicator:
                    line_totals.append(cii.Amount(value=amount.value.copy_negate()))
                    charge_totals.append(amount)
                else:
                    line_totals.append(amount)
                    allowance_totals.append(amount)
            log.debug(
                "Moved %s %s of parent line %s to document level",
                "charge" if moved.charge_indicator else "allowance",
                amount.value if amount is not None else None,
                line.id,
            )
            header_allowances.append(convert_allowance_charge(moved))

    return ParentLineAdjustment(
        allowance_charges=tuple(header_allowances),
        monetary_summation=replace(
            summation,
            line_total=_collapse(line_totals),
            charge_total=_collapse(charge_totals),
            allowance_total=_collapse(allowance_totals),
        ),
    )
