import calendar
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Tuple

MONTH_ABBREVIATIONS = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']

MONTH_NAMES_ID = [
    'Januari', 'Februari', 'Maret', 'April', 'Mei', 'Juni',
    'Juli', 'Agustus', 'September', 'Oktober', 'November', 'Desember'
]

ZERO = Decimal("0")
CENT = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    # Drivers return aggregates as Decimal, int or float depending on the backend
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Any) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def calc_growth(current: Any, previous: Any) -> Decimal:
    """
    Percentage growth (current - previous) / previous * 100, rounded to 2 decimal places.
    Zero when there is nothing to compare with.
    """
    current = to_decimal(current)
    previous = to_decimal(previous)
    if previous <= 0:
        return ZERO.quantize(CENT)

    return ((current - previous) / previous * 100).quantize(CENT, rounding=ROUND_HALF_UP)


def year_bounds(year: int) -> Tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)
