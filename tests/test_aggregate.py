from decimal import Decimal

from ubl2cii.convert import redistribute_parent_allowances, tax_categories
from ubl2cii.convert.aggregate import (
    TaxCategoryKey,
    collect_parent_lines,
    dominant_tax_category,
)
from ubl2cii.model import cii, ubl
from ubl2cii.model.ubl import DocumentVariant


def _amount(value: str) -> ubl.Amount:
    return ubl.Amount(Decimal(value), "EUR")


def _subtotal(tax: str, category: str, percent: str, scheme="VAT") -> ubl.TaxSubtotal:
    return ubl.TaxSubtotal(
        taxable_amount=_amount("100.00"),
        tax_amount=_amount(tax),
        tax_category=ubl.TaxCategory(
            id=category, percent=Decimal(percent), tax_scheme_id=scheme
        ),
    )


def _document(lines=(), tax_totals=()) -> ubl.SourceDocument:
    return ubl.SourceDocument(
        variant=DocumentVariant.INVOICE,
        id="INV-1",
        lines=tuple(lines),
        tax_totals=tuple(tax_totals),
    )


def test_tax_reconciliation_sums_all_subtotals():
    doc = _document(
        tax_totals=[
            ubl.TaxTotal(
                tax_amount=_amount("21.80"),
                subtotals=(
                    _subtotal("19.00", "S", "19"),
                    _subtotal("2.80", "AA", "7"),
                ),
            ),
            ubl.TaxTotal(
                tax_amount=_amount("0.10"),
                subtotals=(_subtotal("0.10", "S", "19.00"),),
            ),
        ]
    )
    categories, declared = tax_categories(doc)
    assert declared == Decimal("21.90")
    # 19 and 19.00 share one bucket
    assert categories == {
        TaxCategoryKey("VAT", Decimal("19"), "S"): Decimal("19.10"),
        TaxCategoryKey("VAT", Decimal("7"), "AA"): Decimal("2.80"),
    }
    assert sum(categories.values()) == Decimal("21.90")


def test_missing_tax_amount_counts_as_zero():
    doc = _document(
        tax_totals=[
            ubl.TaxTotal(
                subtotals=(ubl.TaxSubtotal(tax_category=ubl.TaxCategory(id="Z")),)
            )
        ]
    )
    categories, declared = tax_categories(doc)
    assert declared == 0
    assert categories == {TaxCategoryKey(None, None, "Z"): Decimal("0")}


def test_dominant_category_is_highest_amount():
    categories = {
        TaxCategoryKey("VAT", Decimal("7"), "AA"): Decimal("2.80"),
        TaxCategoryKey("VAT", Decimal("19"), "S"): Decimal("11.40"),
    }
    assert dominant_tax_category(categories) == TaxCategoryKey("VAT", Decimal("19"), "S")


def test_dominant_category_tie_keeps_first():
    first = TaxCategoryKey("VAT", Decimal("7"), "AA")
    second = TaxCategoryKey("VAT", Decimal("19"), "S")
    assert dominant_tax_category({first: Decimal("5"), second: Decimal("5")}) == first
    assert dominant_tax_category({}) is None


def test_collect_parent_lines_recursive():
    leaf = ubl.SourceLine(id="1.1.1")
    inner = ubl.SourceLine(id="1.1", sub_lines=(leaf,))
    outer = ubl.SourceLine(id="1", sub_lines=(inner, ubl.SourceLine(id="1.2")))
    plain = ubl.SourceLine(id="2")
    assert [l.id for l in collect_parent_lines((outer, plain))] == ["1", "1.1"]


def test_no_parent_lines_is_noop():
    summation = cii.MonetarySummation(line_total=cii.Amount(Decimal("100")))
    doc = _document(lines=[ubl.SourceLine(id="1")])
    adjustment = redistribute_parent_allowances(doc, summation)
    assert adjustment.allowance_charges == ()
    assert adjustment.monetary_summation is summation


def _bundle_document():
    allowance = ubl.AllowanceCharge(
        charge_indicator=False,
        amount=_amount("5.00"),
        multiplier_factor=Decimal("5"),
        base_amount=_amount("100.00"),
        tax_categories=(ubl.TaxCategory(id="E", percent=Decimal("0"), tax_scheme_id="VAT"),),
    )
    charge = ubl.AllowanceCharge(charge_indicator=True, amount=_amount("2.00"))
    parent = ubl.SourceLine(
        id="1",
        allowance_charges=(allowance, charge),
        sub_lines=(ubl.SourceLine(id="1.1"), ubl.SourceLine(id="1.2")),
    )
    return _document(
        lines=[parent],
        tax_totals=[
            ubl.TaxTotal(
                tax_amount=_amount("14.20"),
                subtotals=(
                    _subtotal("2.80", "AA", "7"),
                    _subtotal("11.40", "S", "19"),
                ),
            )
        ],
    )


def test_parent_allowances_move_to_header():
    summation = cii.MonetarySummation(
        line_total=cii.Amount(Decimal("100")),
        tax_total=cii.Amount(Decimal("14.2"), "EUR"),
    )
    adjustment = redistribute_parent_allowances(_bundle_document(), summation)

    allowance, charge = adjustment.allowance_charges
    assert allowance.charge_indicator is False
    assert allowance.calculation_percent is None
    assert allowance.basis_amount is None
    assert allowance.actual_amount == cii.Amount(Decimal("5"))
    assert allowance.category_trade_tax == cii.TradeTax(
        type_code="VAT", category_code="S", rate_percent=Decimal("19")
    )
    assert charge.charge_indicator is True
    assert charge.category_trade_tax.category_code == "S"

    result = adjustment.monetary_summation
    assert result.line_total == cii.Amount(Decimal("103"))
    assert result.allowance_total == cii.Amount(Decimal("5"))
    assert result.charge_total == cii.Amount(Decimal("2"))
    # untouched fields survive
    assert result.tax_total == cii.Amount(Decimal("14.2"), "EUR")
    # input summation is not mutated
    assert summation.allowance_total is None


def test_existing_totals_are_added_to():
    summation = cii.MonetarySummation(
        line_total=cii.Amount(Decimal("100")),
        allowance_total=cii.Amount(Decimal("1.50")),
        charge_total=cii.Amount(Decimal("0.5")),
    )
    result = redistribute_parent_allowances(_bundle_document(), summation).monetary_summation
    assert result.allowance_total.value == Decimal("6.5")
    assert result.charge_total.value == Decimal("2.5")


def test_parent_without_allowances_collapses_to_zero():
    parent = ubl.SourceLine(id="1", sub_lines=(ubl.SourceLine(id="1.1"),))
    adjustment = redistribute_parent_allowances(
        _document(lines=[parent]), cii.MonetarySummation()
    )
    assert adjustment.allowance_charges == ()
    summation = adjustment.monetary_summation
    assert summation.line_total.value == 0
    assert summation.charge_total.value == 0
    assert summation.allowance_total.value == 0


def test_no_tax_categories_keeps_own_category():
    allowance = ubl.AllowanceCharge(
        charge_indicator=False,
        amount=_amount("1.00"),
        tax_categories=(ubl.TaxCategory(id="E", percent=Decimal("0"), tax_scheme_id="VAT"),),
    )
    parent = ubl.SourceLine(
        id="1", allowance_charges=(allowance,), sub_lines=(ubl.SourceLine(id="1.1"),)
    )
    (moved,) = redistribute_parent_allowances(
        _document(lines=[parent]), cii.MonetarySummation()
    ).allowance_charges
    assert moved.category_trade_tax.category_code == "E"


def test_long_amounts_are_summed_exactly():
    long_tax = "1234567890123456789012345678901.10"
    doc = _document(
        tax_totals=[
            ubl.TaxTotal(
                tax_amount=_amount(long_tax),
                subtotals=(
                    _subtotal("1234567890123456789012345678901.00", "S", "19"),
                    _subtotal("0.10", "S", "19"),
                ),
            )
        ]
    )
    categories, declared = tax_categories(doc)
    assert declared == Decimal(long_tax)
    assert categories[TaxCategoryKey("VAT", Decimal("19"), "S")] == Decimal(long_tax)


def test_long_charge_is_negated_exactly():
    charge = ubl.AllowanceCharge(
        charge_indicator=True, amount=_amount("1234567890123456789012345678901.5")
    )
    parent = ubl.SourceLine(
        id="1", allowance_charges=(charge,), sub_lines=(ubl.SourceLine(id="1.1"),)
    )
    summation = redistribute_parent_allowances(
        _document(lines=[parent]), cii.MonetarySummation()
    ).monetary_summation
    assert summation.line_total.value == Decimal("-1234567890123456789012345678901.5")
    assert summation.charge_total.value == Decimal("1234567890123456789012345678901.5")
