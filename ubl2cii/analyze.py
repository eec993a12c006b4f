from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path

import pandas as pd

from ubl2cii.convert import tax_categories
from ubl2cii.errors import ErrorList
from ubl2cii.parsing.money import exact_sum
from ubl2cii.parsing.ubl import read_document

log = logging.getLogger(__name__)

COLUMNS = ["scheme", "percent", "category", "amount"]


def analyze_taxes(xml_path: str | Path) -> tuple[pd.DataFrame, Decimal, bool]:
    """Aggregate the tax subtotals of a UBL document per tax category.

    Returns ``(df, declared_total, ok)`` where ``df`` has one row per
    ``(scheme, percent, category)`` bucket in document order,
    ``declared_total`` is the sum of the document's tax totals and ``ok``
    tells whether the bucket amounts add up to it.

    Raises :class:`ValueError` when the document cannot be read.
    """
    errors = ErrorList()
    document = read_document(Path(xml_path), errors)
    if document is None:
        raise ValueError("; ".join(e.text for e in errors.errors))

    categories, declared_total = tax_categories(document)
    rows = [
        {
            "scheme": key.scheme_id,
            "percent": key.percent,
            "category": key.type_code,
            "amount": amount,
        }
        for key, amount in categories.items()
    ]
    df = pd.DataFrame(rows, columns=COLUMNS)

    category_total = exact_sum(categories.values())
    ok = category_total == declared_total
    if not ok:
        log.warning(
            "Tax categories of %s sum to %s, declared total is %s",
            xml_path,
            category_total,
            declared_total,
        )
    return df, declared_total, ok
