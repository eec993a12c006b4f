# File: ubl2cii/parsing/money.py
from __future__ import annotations

from decimal import Context, Decimal, InvalidOperation, localcontext
from typing import Iterable


def parse_decimal(text: str) -> Decimal:
    """Return ``text`` as :class:`Decimal`.

    UBL amounts always use ``.`` as decimal separator, so no locale
    handling is done.  Raises :class:`ValueError` for anything that is not
    a finite number.
    """
    s = text.strip().replace("\xa0", "")
    try:
        value = Decimal(s)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid decimal value '{text}'") from exc
    if not value.is_finite():
        raise ValueError(f"Invalid decimal value '{text}'")
    return value


def strip_trailing_zeros(value: Decimal) -> Decimal:
    """Drop trailing fractional zeros (``12.50`` -> ``12.5``, ``100.00`` -> ``100``).

    Works on the digit tuple, so no context precision limits the result.
    """
    sign, digits, exponent = value.as_tuple()
    digits = list(digits)
    if exponent > 0:
        digits.extend([0] * exponent)
        exponent = 0
    while exponent < 0 and len(digits) > 1 and digits[-1] == 0:
        digits.pop()
        exponent += 1
    if digits == [0]:
        return Decimal(0)
    return Decimal((sign, tuple(digits), exponent))


def _exact_context(values: list[Decimal]) -> Context:
    # enough digits for the widest operand plus carries
    finite = [v for v in values if v]
    if not finite:
        return Context(prec=28)
    top = max(v.adjusted() for v in finite)
    bottom = min(v.as_tuple().exponent for v in finite)
    return Context(prec=max(28, top - bottom + 1 + len(str(len(values)))))


def exact_sum(values: Iterable[Decimal]) -> Decimal:
    """Sum without rounding, whatever the number of digits."""
    items = list(values)
    total = Decimal("0")
    with localcontext(_exact_context(items)):
        for value in items:
            total += value
    return total


def sum_amounts(values: Iterable[Decimal]) -> Decimal:
    """Exact decimal sum without trailing zeros; an empty iterable sums to ``0``."""
    return strip_trailing_zeros(exact_sum(values))


def format_decimal(value: Decimal) -> str:
    """Plain notation without exponent, as required by the CII schema."""
    return format(value, "f")
