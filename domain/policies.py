"""Domain Policies - which reservations count where"""
from datetime import date
from typing import FrozenSet

from domain.enums import ReservationStatus, ReportingMode


# Statuses that hold a room: a second blocking reservation on the same room
# and overlapping nights is a double booking.
BLOCKING_STATUSES: FrozenSet[ReservationStatus] = frozenset({
    ReservationStatus.CONFIRMED,
    ReservationStatus.CHECKED_IN,
    ReservationStatus.CHECKED_OUT,
})

# Revenue draws from the same pool in both modes; the mode decides per night.
REVENUE_STATUSES: FrozenSet[ReservationStatus] = BLOCKING_STATUSES

_OCCUPANCY_STATUSES = {
    ReportingMode.ACTUAL: frozenset({ReservationStatus.CHECKED_IN, ReservationStatus.CHECKED_OUT}),
    ReportingMode.FORECAST: frozenset({ReservationStatus.CONFIRMED, ReservationStatus.DRAFT}),
}


def is_blocking(status: ReservationStatus) -> bool:
    return status in BLOCKING_STATUSES


def is_excluded_from_revenue(status: ReservationStatus) -> bool:
    return status not in REVENUE_STATUSES


def occupancy_statuses(mode: ReportingMode) -> FrozenSet[ReservationStatus]:
    """Actual counts guests who arrived; Forecast counts guests still expected"""
    return _OCCUPANCY_STATUSES[mode]


def counts_night_as_revenue(mode: ReportingMode, status: ReservationStatus, night: date, today: date) -> bool:
    """Decide whether one night of a reservation is revenue in ``mode``.

    Actual: every night of a checked-out stay, and the already slept nights
    (before ``today``) of an in-house stay.
    Forecast: every night of a confirmed or checked-out stay, and the nights
    still to come (``today`` onwards) of an in-house stay.
    """
    if mode == ReportingMode.ACTUAL:
        if status == ReservationStatus.CHECKED_OUT:
            return True
        return status == ReservationStatus.CHECKED_IN and night < today

    if status in (ReservationStatus.CONFIRMED, ReservationStatus.CHECKED_OUT):
        return True
    return status == ReservationStatus.CHECKED_IN and night >= today


# Stays the front desk works with: guests expected and guests in house.
RECEPTION_STATUSES: FrozenSet[ReservationStatus] = frozenset({
    ReservationStatus.CONFIRMED,
    ReservationStatus.CHECKED_IN,
})
