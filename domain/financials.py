"""Domain Financial Calculations - line totals and nightly proration"""
from datetime import date, timedelta
from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_EVEN
from typing import Iterable, List, Tuple

from domain.entities import ReservationLine
from domain.value_objects import NightlyAmount

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def round_money(value: Decimal) -> Decimal:
    """Round to cents, ties to even"""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_EVEN)


def calculate_nights(check_in: date, check_out: date) -> int:
    """Billable nights; a same-day stay still bills one night"""
    nights = (check_out - check_in).days
    return nights if nights >= 1 else 1


def calculate_line_total(rate_per_night: Decimal, nights: int) -> Decimal:
    return round_money(rate_per_night * nights)


def calculate_total_amount(lines: Iterable[ReservationLine]) -> Decimal:
    return round_money(sum((line.line_total for line in lines), Decimal("0")))


def prorate_nightly(total_amount: Decimal, check_in: date, check_out: date) -> List[NightlyAmount]:
    """Split ``total_amount`` evenly over the nights of ``[check_in, check_out)``.

    Every night gets the total divided by the night count, rounded down to the
    cent. The last night also takes whatever cents are left over, so the
    nightly amounts always add back up to ``total_amount`` exactly::

        100.00 over 3 nights -> 33.33, 33.33, 33.34
    """
    total_nights = calculate_nights(check_in, check_out)
    base_nightly = (total_amount / total_nights).quantize(CENT, rounding=ROUND_FLOOR)
    remainder = round_money(total_amount - base_nightly * total_nights)

    nightly = []
    for i in range(total_nights):
        amount = base_nightly
        if i == total_nights - 1:
            amount += remainder
        nightly.append(NightlyAmount(night=check_in + timedelta(days=i), amount=amount))
    return nightly


def weighted_line_shares(nightly_amount: Decimal, lines: List[ReservationLine]) -> List[Tuple[ReservationLine, Decimal]]:
    """Distribute one night's amount across lines, weighted by rate per night.

    Shares are rounded independently per line and are not reconciled back to
    ``nightly_amount``; a few cents of drift across lines is accepted.
    Lines with no rate at all share the night equally.
    """
    if not lines:
        return []

    total_weight = sum((line.rate_per_night for line in lines), Decimal("0"))
    if total_weight == 0:
        equal = round_money(nightly_amount / len(lines))
        return [(line, equal) for line in lines]

    return [
        (line, round_money(nightly_amount * (line.rate_per_night / total_weight)))
        for line in lines
    ]
