from decimal import Decimal

from ubl2cii.convert import convert_line, convert_lines
from ubl2cii.convert.lines import count_lines
from ubl2cii.model import cii, ubl


def _amount(value: str) -> ubl.Amount:
    return ubl.Amount(Decimal(value), "EUR")


def _line(line_id, *sub_lines, extension="10.00", allowances=()):
    return ubl.SourceLine(
        id=line_id,
        item=ubl.Item(
            name=f"Item {line_id}",
            tax_categories=(
                ubl.TaxCategory(id="S", percent=Decimal("19"), tax_scheme_id="VAT"),
            ),
        ),
        quantity=ubl.Quantity(Decimal("1"), "C62"),
        price_amount=_amount(extension),
        line_extension_amount=_amount(extension),
        allowance_charges=allowances,
        sub_lines=sub_lines,
    )


DISCOUNT = ubl.AllowanceCharge(charge_indicator=False, amount=_amount("1.00"))


def test_single_line_has_no_parent():
    (item,) = convert_line(_line("1"))
    assert item.document.line_id == "1"
    assert item.document.parent_line_id is None
    assert item.settlement.monetary_summation.line_total == cii.Amount(Decimal("10"))
    assert item.agreement.net_price == cii.Amount(Decimal("10"))
    assert item.delivery.billed_quantity == cii.Quantity(Decimal("1"), "C62")
    assert item.settlement.taxes[0].category_code == "S"
    assert item.settlement.taxes[0].type_code == "VAT"


def test_pre_order_flattening_and_parent_ids():
    tree = _line(
        "1",
        _line("1.1", _line("1.1.1"), _line("1.1.2")),
        _line("1.2"),
    )
    items = convert_line(tree)
    assert [i.document.line_id for i in items] == ["1", "1.1", "1.1.1", "1.1.2", "1.2"]
    assert [i.document.parent_line_id for i in items] == [None, "1", "1.1", "1.1", "1"]


def test_line_coverage_counts_every_depth():
    lines = (
        _line("1", _line("1.1", _line("1.1.1", _line("1.1.1.1")))),
        _line("2"),
        _line("3", _line("3.1"), _line("3.2")),
    )
    items = convert_lines(lines)
    assert len(items) == count_lines(lines) == 8


def test_parent_line_is_zeroed():
    parent = _line("1", _line("1.1"), extension="25.00", allowances=(DISCOUNT,))
    items = convert_line(parent)
    parent_item = items[0]
    assert parent_item.settlement.monetary_summation.line_total.value == 0
    assert parent_item.agreement.net_price.value == 0
    assert parent_item.settlement.allowance_charges == ()
    # sub-line keeps its own data
    assert items[1].settlement.monetary_summation.line_total.value == Decimal("10")


def test_leaf_line_keeps_allowances():
    (item,) = convert_line(_line("1", allowances=(DISCOUNT,)))
    (ac,) = item.settlement.allowance_charges
    assert ac.charge_indicator is False
    assert ac.actual_amount == cii.Amount(Decimal("1"))


def test_missing_price_and_quantity_stay_absent():
    line = ubl.SourceLine(id="1", line_extension_amount=_amount("0.00"))
    (item,) = convert_line(line)
    assert item.agreement.net_price is None
    assert item.delivery.billed_quantity is None
    assert item.settlement.taxes == ()


def test_parent_without_price_gets_no_price():
    parent = ubl.SourceLine(id="1", sub_lines=(_line("1.1"),))
    items = convert_line(parent)
    assert items[0].agreement.net_price is None
    assert items[0].settlement.monetary_summation.line_total.value == 0


def test_product_details():
    line = ubl.SourceLine(
        id="1",
        notes=("Note A",),
        order_line_id="7",
        accounting_cost="CC-1",
        item=ubl.Item(
            name="Consulting",
            descriptions=("First", "Second"),
            standard_id=ubl.Identifier("4012345000009", "0160"),
            sellers_id="CONS-01",
            properties=(ubl.ItemProperty("Level", "Senior"),),
            classifications=(ubl.CommodityClassification("73110000", "STI"),),
        ),
    )
    (item,) = convert_line(line)
    product = item.product
    assert product.name == cii.Text("Consulting")
    assert product.description == "First"
    assert product.global_id == cii.ID("4012345000009", "0160")
    assert product.seller_assigned_id == "CONS-01"
    assert product.characteristics == (
        cii.ProductCharacteristic(cii.Text("Level"), cii.Text("Senior")),
    )
    assert product.classifications == (cii.ProductClassification("73110000", "STI"),)
    assert item.document.notes == ("Note A",)
    assert item.agreement.buyer_order_reference.line_id == "7"
    assert item.settlement.accounting_account == "CC-1"


def test_source_line_is_not_modified():
    parent = _line("1", _line("1.1"), allowances=(DISCOUNT,))
    convert_line(parent)
    assert parent.line_extension_amount == _amount("10.00")
    assert parent.allowance_charges == (DISCOUNT,)
