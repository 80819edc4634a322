"""Dashboard - occupancy, revenue and expenses aligned per day with KPIs"""
import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from application.dtos import (
    Dashboard, DashboardKpiSummary, DashboardSeriesPoint, DashboardRoomTypeKpi,
    OccupancySummary, RevenueSummary
)
from application.expenses import ExpenseAggregator
from application.interfaces import DateTimeProvider
from application.occupancy import OccupancyService
from application.revenue import RevenueService
from domain.enums import ReportingMode, RevenueGroupBy, OccupancyGroupBy, CurrencyCode
from domain.financials import ZERO, round_money

logger = logging.getLogger(__name__)


def _per_unit(amount: Decimal, units: int) -> Decimal:
    return round_money(amount / units) if units > 0 else ZERO


class DashboardService:
    """Composes the occupancy, revenue and expense reports for one range.

    ``date_to`` is exclusive for revenue and expenses. Occupancy is asked for
    ``[date_from, date_to]`` inclusive, so the series carries one more day than
    there are revenue nights; that last day shows occupancy with no revenue.
    """

    def __init__(
        self,
        occupancy_service: OccupancyService,
        revenue_service: RevenueService,
        expense_aggregator: ExpenseAggregator,
        clock: DateTimeProvider,
        default_currency: CurrencyCode = CurrencyCode.EGP,
        default_days: int = 7
    ):
        self.occupancy_service = occupancy_service
        self.revenue_service = revenue_service
        self.expense_aggregator = expense_aggregator
        self.clock = clock
        self.default_currency = default_currency
        self.default_days = default_days

    async def get_dashboard(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        mode: ReportingMode = ReportingMode.FORECAST,
        include_room_type_breakdown: bool = True,
        currency: Optional[CurrencyCode] = None
    ) -> Dashboard:
        start = date_from or self.clock.today()
        end = date_to or start + timedelta(days=self.default_days)
        if end <= start:
            end = start + timedelta(days=1)
        last_night = end - timedelta(days=1)
        currency = currency or self.default_currency

        occupancy = await self.occupancy_service.get_occupancy(
            start, end, mode,
            OccupancyGroupBy.BOTH if include_room_type_breakdown else OccupancyGroupBy.DAY
        )
        revenue_by_day = await self.revenue_service.get_revenue_summary(
            start, last_night, mode, RevenueGroupBy.DAY, currency, include_expenses=False
        )
        expenses = await self.expense_aggregator.aggregate(start, last_night, currency)

        revenue_on: Dict[date, Decimal] = {
            date.fromisoformat(item.key): item.revenue for item in revenue_by_day.items
        }

        by_day: List[DashboardSeriesPoint] = []
        for day in occupancy.by_day:
            revenue = revenue_on.get(day.date, ZERO)
            spent = expenses.by_day.get(day.date, ZERO)
            by_day.append(DashboardSeriesPoint(
                date=day.date,
                total_rooms=day.total_rooms,
                occupied_rooms=day.occupied_rooms,
                occupancy_rate=day.occupancy_rate,
                revenue=revenue,
                expenses=spent,
                net_profit=revenue - spent,
                adr=_per_unit(revenue, day.occupied_rooms),
                rev_par=_per_unit(revenue, day.total_rooms)
            ))

        total_revenue = revenue_by_day.total_revenue
        summary = DashboardKpiSummary(
            from_date=start,
            to_date=end,
            nights_count=(end - start).days,
            mode=mode,
            currency=currency,
            total_rooms=occupancy.total_rooms,
            supply_room_nights=occupancy.supply_room_nights,
            sold_room_nights=occupancy.sold_room_nights,
            occupancy_rate_overall=occupancy.occupancy_rate_overall,
            total_revenue=total_revenue,
            total_expenses=expenses.total,
            net_profit=total_revenue - expenses.total,
            adr=_per_unit(total_revenue, occupancy.sold_room_nights),
            rev_par=_per_unit(total_revenue, occupancy.supply_room_nights)
        )

        by_room_type = None
        if include_room_type_breakdown:
            revenue_by_room_type = await self.revenue_service.get_revenue_summary(
                start, last_night, mode, RevenueGroupBy.ROOM_TYPE, currency, include_expenses=False
            )
            by_room_type = self._room_type_kpis(occupancy, revenue_by_room_type)

        logger.info(
            "Dashboard %s..%s mode=%s %s: revenue=%s expenses=%s days=%d",
            start, end, mode.value, currency.value, total_revenue, expenses.total, len(by_day)
        )

        return Dashboard(
            summary=summary,
            by_day=by_day,
            by_room_type=by_room_type,
            by_category=expenses.by_category
        )

    @staticmethod
    def _room_type_kpis(occupancy: OccupancySummary, revenue: RevenueSummary) -> List[DashboardRoomTypeKpi]:
        """Join sold room-nights and revenue on the room-type id"""
        sold: Dict[UUID, int] = {}
        names: Dict[UUID, Optional[str]] = {}
        for row in occupancy.by_room_type_by_day:
            sold[row.room_type_id] = sold.get(row.room_type_id, 0) + row.room_nights_sold_of_type
            names.setdefault(row.room_type_id, row.room_type_name)

        earned: Dict[UUID, Decimal] = {}
        for item in revenue.items:
            if item.ref_id is None:
                continue
            earned[item.ref_id] = item.revenue
            names.setdefault(item.ref_id, item.key)

        kpis = []
        for room_type_id in list(sold) + [rt for rt in earned if rt not in sold]:
            room_nights = sold.get(room_type_id, 0)
            amount = earned.get(room_type_id, ZERO)
            kpis.append(DashboardRoomTypeKpi(
                room_type_id=room_type_id,
                room_type_name=names.get(room_type_id),
                sold_room_nights=room_nights,
                revenue=amount,
                adr=_per_unit(amount, room_nights)
            ))
        return kpis
