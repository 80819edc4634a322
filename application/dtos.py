"""Application DTOs - report results returned by the reporting services"""
from pydantic import BaseModel
import datetime as dt
from decimal import Decimal
from uuid import UUID
from typing import Dict, List, Optional

from domain.enums import (
    ReportingMode, RevenueGroupBy, CurrencyCode, ReservationStatus, ExpenseCategory,
    PaymentMethod, RoomStatus, RoomBoardStatus
)
from domain.value_objects import NightlyAmount


# ============================================================================
# OCCUPANCY
# ============================================================================

class OccupancyDay(BaseModel):
    date: dt.date
    total_rooms: int
    occupied_rooms: int
    occupancy_rate: float
    room_nights_sold: int
    available_rooms: int
    overbooked: bool


class OccupancyByRoomTypeDay(BaseModel):
    date: dt.date
    room_type_id: UUID
    room_type_name: Optional[str] = None
    occupied_rooms_of_type: int
    room_nights_sold_of_type: int


class OccupancySummary(BaseModel):
    """Occupancy for every night from ``from_date`` to ``to_date`` inclusive"""
    from_date: dt.date
    to_date: dt.date
    nights_count: int
    mode: ReportingMode
    total_rooms: int
    supply_room_nights: int
    sold_room_nights: int
    occupancy_rate_overall: float
    by_day: List[OccupancyDay] = []
    by_room_type_by_day: List[OccupancyByRoomTypeDay] = []


# ============================================================================
# REVENUE & EXPENSES
# ============================================================================

class RevenueItem(BaseModel):
    key: str
    revenue: Decimal
    ref_id: Optional[UUID] = None


class ExpenseCategoryAmount(BaseModel):
    category_id: int
    category_name: str
    amount: Decimal


class ExpenseAggregate(BaseModel):
    """Expenses summed by business date and by category"""
    total: Decimal
    by_day: Dict[dt.date, Decimal] = {}
    by_category: List[ExpenseCategoryAmount] = []


class RevenueSummary(BaseModel):
    """Revenue for every night from ``from_date`` to ``to_date`` inclusive"""
    from_date: dt.date
    to_date: dt.date
    mode: ReportingMode
    group_by: RevenueGroupBy
    currency: CurrencyCode
    total_revenue: Decimal
    items: List[RevenueItem] = []
    by_expense_category: List[ExpenseCategoryAmount] = []


# ============================================================================
# DASHBOARD
# ============================================================================

class DashboardKpiSummary(BaseModel):
    from_date: dt.date
    to_date: dt.date  # exclusive
    nights_count: int
    mode: ReportingMode
    currency: CurrencyCode
    total_rooms: int
    supply_room_nights: int
    sold_room_nights: int
    occupancy_rate_overall: float
    total_revenue: Decimal
    total_expenses: Decimal
    net_profit: Decimal
    adr: Decimal
    rev_par: Decimal


class DashboardSeriesPoint(BaseModel):
    date: dt.date
    total_rooms: int
    occupied_rooms: int
    occupancy_rate: float
    revenue: Decimal
    expenses: Decimal
    net_profit: Decimal
    adr: Decimal
    rev_par: Decimal


class DashboardRoomTypeKpi(BaseModel):
    room_type_id: UUID
    room_type_name: Optional[str] = None
    sold_room_nights: int
    revenue: Decimal
    adr: Decimal


class Dashboard(BaseModel):
    summary: DashboardKpiSummary
    by_day: List[DashboardSeriesPoint] = []
    by_room_type: Optional[List[DashboardRoomTypeKpi]] = None
    by_category: List[ExpenseCategoryAmount] = []


# ============================================================================
# RESERVATION FINANCIALS & CASH FLOW
# ============================================================================

class ReservationLineBreakdown(BaseModel):
    line_id: UUID
    room_id: UUID
    room_number: str
    room_type_id: UUID
    room_type_name: str
    rate_per_night: Decimal
    line_total: Decimal


class ReservationFinancialBreakdown(BaseModel):
    reservation_id: UUID
    check_in_date: dt.date
    check_out_date: dt.date
    nights: int
    status: ReservationStatus
    total_amount: Decimal
    currency: CurrencyCode
    is_excluded_from_revenue: bool
    lines: List[ReservationLineBreakdown] = []
    nightly: List[NightlyAmount] = []


class DailyCashFlow(BaseModel):
    business_date: dt.date
    currency: CurrencyCode
    total_cash_payments: Decimal
    total_cash_expenses: Decimal
    net_cash_in_drawer: Decimal


# ============================================================================
# RECEPTION
# ============================================================================

class ReceptionReservationItem(BaseModel):
    reservation_id: UUID
    booking_number: str
    guest_name: str
    phone: Optional[str] = None
    check_in_date: dt.date
    check_out_date: dt.date
    status: ReservationStatus
    room_numbers: List[str] = []
    room_type_names: List[str] = []
    total_amount: Decimal
    balance_due: Decimal
    currency: CurrencyCode
    payment_method: PaymentMethod
    is_late_check_out: bool = False


class ReceptionTodaySummary(BaseModel):
    arrivals_count: int
    departures_count: int
    in_house_count: int


class ReceptionToday(BaseModel):
    """Front-desk worklist for one business date"""
    date: dt.date
    summary: ReceptionTodaySummary
    arrivals: List[ReceptionReservationItem] = []
    departures: List[ReceptionReservationItem] = []
    in_house: List[ReceptionReservationItem] = []


class RoomBoardReservation(BaseModel):
    reservation_id: UUID
    guest_name: str
    booking_number: Optional[str] = None
    check_in_date: dt.date
    check_out_date: dt.date
    hotel_name: Optional[str] = None


class RoomBoardItem(BaseModel):
    room_id: UUID
    room_number: str
    room_type_name: str
    room_status: RoomStatus
    status: RoomBoardStatus = RoomBoardStatus.AVAILABLE
    reservation: Optional[RoomBoardReservation] = None


class ReceptionRoomsStatus(BaseModel):
    date: dt.date
    items: List[RoomBoardItem] = []


def category_amount(category: ExpenseCategory, amount: Decimal) -> ExpenseCategoryAmount:
    return ExpenseCategoryAmount(category_id=category.value, category_name=category.name, amount=amount)
