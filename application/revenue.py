"""Revenue reporting - prorated nightly revenue grouped by day, room, room type, branch or hotel"""
import logging
from datetime import date
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Tuple
from uuid import UUID

from application.dtos import (
    RevenueItem, RevenueSummary, ReservationFinancialBreakdown, ReservationLineBreakdown
)
from application.expenses import ExpenseAggregator
from application.interfaces import DateTimeProvider
from application.report_context import ReservationWindowFilter, ReportLookups, UNKNOWN_HOTEL
from domain.entities import Reservation
from domain.enums import ReportingMode, RevenueGroupBy, CurrencyCode
from domain.financials import (
    ZERO, round_money, calculate_nights, prorate_nightly, weighted_line_shares
)
from domain.policies import counts_night_as_revenue, is_excluded_from_revenue
from domain.repositories import (
    ReservationRepository, RoomRepository, RoomTypeRepository, BranchRepository
)
from domain.value_objects import BucketKey, NightlyAmount

logger = logging.getLogger(__name__)

Bucketer = Callable[[Reservation, NightlyAmount, ReportLookups], List[Tuple[BucketKey, Decimal]]]


def _by_day(reservation: Reservation, nightly: NightlyAmount, lookups: ReportLookups):
    return [(BucketKey(label=nightly.night.isoformat()), nightly.amount)]


def _by_room_type(reservation: Reservation, nightly: NightlyAmount, lookups: ReportLookups):
    return [
        (BucketKey(label=lookups.room_type_name(line.room_type_id), ref_id=line.room_type_id), share)
        for line, share in weighted_line_shares(nightly.amount, reservation.lines)
    ]


def _by_room(reservation: Reservation, nightly: NightlyAmount, lookups: ReportLookups):
    return [
        (BucketKey(label=lookups.room_number(line.room_id), ref_id=line.room_id), share)
        for line, share in weighted_line_shares(nightly.amount, reservation.lines)
    ]


def _by_branch(reservation: Reservation, nightly: NightlyAmount, lookups: ReportLookups):
    return [(BucketKey(label=lookups.branch_name(reservation.branch_id), ref_id=reservation.branch_id), nightly.amount)]


def _by_hotel(reservation: Reservation, nightly: NightlyAmount, lookups: ReportLookups):
    hotel = (reservation.hotel_name or "").strip() or UNKNOWN_HOTEL
    return [(BucketKey(label=hotel), nightly.amount)]


BUCKETERS: Dict[RevenueGroupBy, Bucketer] = {
    RevenueGroupBy.DAY: _by_day,
    RevenueGroupBy.ROOM_TYPE: _by_room_type,
    RevenueGroupBy.ROOM: _by_room,
    RevenueGroupBy.BRANCH: _by_branch,
    RevenueGroupBy.HOTEL: _by_hotel,
}

_unmapped = set(RevenueGroupBy) - set(BUCKETERS)
if _unmapped:
    raise RuntimeError(f"No revenue bucketing for {sorted(g.value for g in _unmapped)}")


def aggregate_revenue(
    reservations: List[Reservation],
    start: date,
    last_night: date,
    mode: ReportingMode,
    group_by: RevenueGroupBy,
    today: date,
    lookups: ReportLookups
) -> Dict[BucketKey, Decimal]:
    """Walk every prorated night of every reservation into revenue buckets.

    Only nights inside ``[start, last_night]`` that the mode counts as revenue
    are added. Each bucket is rounded to cents after every addition.
    """
    bucketer = BUCKETERS[group_by]
    buckets: Dict[BucketKey, Decimal] = {}
    for reservation in reservations:
        for nightly in prorate_nightly(
            reservation.total_amount, reservation.date_range.check_in, reservation.date_range.check_out
        ):
            if not start <= nightly.night <= last_night:
                continue
            if not counts_night_as_revenue(mode, reservation.status, nightly.night, today):
                continue
            for key, amount in bucketer(reservation, nightly, lookups):
                buckets[key] = round_money(buckets.get(key, ZERO) + amount)
    return buckets


class RevenueService:
    """Service for revenue summaries"""

    def __init__(
        self,
        reservation_repo: ReservationRepository,
        room_repo: RoomRepository,
        room_type_repo: RoomTypeRepository,
        branch_repo: BranchRepository,
        expense_aggregator: ExpenseAggregator,
        clock: DateTimeProvider,
        default_currency: CurrencyCode = CurrencyCode.EGP
    ):
        self.window = ReservationWindowFilter(reservation_repo)
        self.room_repo = room_repo
        self.room_type_repo = room_type_repo
        self.branch_repo = branch_repo
        self.expense_aggregator = expense_aggregator
        self.clock = clock
        self.default_currency = default_currency

    async def get_revenue_summary(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        mode: ReportingMode = ReportingMode.FORECAST,
        group_by: RevenueGroupBy = RevenueGroupBy.DAY,
        currency: Optional[CurrencyCode] = None,
        include_expenses: bool = True
    ) -> RevenueSummary:
        """Revenue for the nights ``date_from`` to ``date_to``, both included.

        Both bounds default to hotel today; a ``date_to`` before ``date_from``
        collapses to the single night ``date_from``.
        """
        today = self.clock.today()
        start = date_from or today
        last_night = date_to or start
        if last_night < start:
            last_night = start
        currency = currency or self.default_currency

        reservations = await self.window.for_revenue(start, last_night, currency)
        lookups = await ReportLookups.load(self.room_repo, self.room_type_repo, self.branch_repo)
        buckets = aggregate_revenue(reservations, start, last_night, mode, group_by, today, lookups)

        items = [
            RevenueItem(key=key.label, revenue=amount, ref_id=key.ref_id)
            for key, amount in buckets.items()
        ]
        items.sort(key=lambda item: (item.key, str(item.ref_id or "")))
        total_revenue = round_money(sum((item.revenue for item in items), ZERO))

        by_expense_category = []
        if include_expenses:
            expenses = await self.expense_aggregator.aggregate(start, last_night, currency)
            by_expense_category = expenses.by_category

        logger.info(
            "Revenue %s..%s mode=%s group_by=%s %s: total=%s buckets=%d reservations=%d",
            start, last_night, mode.value, group_by.value, currency.value,
            total_revenue, len(items), len(reservations)
        )

        return RevenueSummary(
            from_date=start,
            to_date=last_night,
            mode=mode,
            group_by=group_by,
            currency=currency,
            total_revenue=total_revenue,
            items=items,
            by_expense_category=by_expense_category
        )


class FinancialBreakdownService:
    """Per-reservation view of lines and nightly allocation"""

    def __init__(
        self,
        reservation_repo: ReservationRepository,
        room_repo: RoomRepository,
        room_type_repo: RoomTypeRepository
    ):
        self.reservation_repo = reservation_repo
        self.room_repo = room_repo
        self.room_type_repo = room_type_repo

    async def get_breakdown(self, reservation_id: UUID) -> Optional[ReservationFinancialBreakdown]:
        reservation = await self.reservation_repo.find_by_id(reservation_id)
        if not reservation:
            return None

        lookups = await ReportLookups.load(self.room_repo, self.room_type_repo)
        check_in = reservation.date_range.check_in
        check_out = reservation.date_range.check_out

        return ReservationFinancialBreakdown(
            reservation_id=reservation.reservation_id,
            check_in_date=check_in,
            check_out_date=check_out,
            nights=calculate_nights(check_in, check_out),
            status=reservation.status,
            total_amount=reservation.total_amount,
            currency=reservation.currency_code,
            is_excluded_from_revenue=is_excluded_from_revenue(reservation.status),
            lines=[
                ReservationLineBreakdown(
                    line_id=line.line_id,
                    room_id=line.room_id,
                    room_number=lookups.room_numbers.get(line.room_id, ""),
                    room_type_id=line.room_type_id,
                    room_type_name=lookups.room_type_names.get(line.room_type_id, ""),
                    rate_per_night=line.rate_per_night,
                    line_total=line.line_total
                )
                for line in reservation.lines
            ],
            nightly=prorate_nightly(reservation.total_amount, check_in, check_out)
        )
