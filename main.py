import logging

from fastapi import FastAPI, HTTPException, Depends, Query, Request
from fastapi.responses import JSONResponse
from uuid import UUID
from datetime import date, timedelta
from typing import List, Optional
from fastapi.security import OAuth2PasswordRequestForm

from api.schemas import (
    # Inventory
    CreateBranchRequest, BranchResponse, CreateRoomTypeRequest, RoomTypeResponse,
    CreateRoomRequest, RoomResponse,
    # Reservation
    CreateReservationRequest, DeleteReservationRequest, RecordPaymentRequest,
    ReservationResponse, ReservationLineResponse, PaymentResponse,
    # Expenses
    CreateExpenseRequest, ExpenseResponse, ExpensesSummaryResponse,
    # Auth
    Token, UserResponse
)
from application.dtos import (
    OccupancySummary, RevenueSummary, Dashboard, ReservationFinancialBreakdown, DailyCashFlow,
    ReceptionToday, ReceptionRoomsStatus
)

from api.dependencies import get_current_active_user, users_db, get_user
from infrastructure.security import verify_password, create_access_token, ACCESS_TOKEN_EXPIRE_MINUTES
from infrastructure.config import settings
from infrastructure.clock import HotelDateTimeProvider
from infrastructure.log_config import configure_logging
from domain.auth import User

from application.services import InventoryService, ReservationService, CashFlowService
from application.expenses import ExpenseService, ExpenseAggregator
from application.occupancy import OccupancyService
from application.revenue import RevenueService, FinancialBreakdownService
from application.dashboard import DashboardService
from application.reception import ReceptionService
from infrastructure.repositories.in_memory_repositories import (
    InMemoryBranchRepository, InMemoryRoomTypeRepository, InMemoryRoomRepository,
    InMemoryReservationRepository, InMemoryExpenseRepository, InMemoryPaymentRepository
)
from domain.enums import (
    ReservationStatus, ExpenseCategory, ReportingMode, RevenueGroupBy,
    OccupancyGroupBy, CurrencyCode
)

configure_logging(settings)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="Hotel property management API: reservations, rooms, expenses and occupancy/revenue reporting",
    version=settings.APP_VERSION
)

# Initialize repositories
branch_repo = InMemoryBranchRepository()
room_type_repo = InMemoryRoomTypeRepository()
room_repo = InMemoryRoomRepository()
reservation_repo = InMemoryReservationRepository()
expense_repo = InMemoryExpenseRepository()
payment_repo = InMemoryPaymentRepository()

hotel_clock = HotelDateTimeProvider(settings)


# Dependency injection
def get_clock() -> HotelDateTimeProvider:
    return hotel_clock

def get_inventory_service() -> InventoryService:
    return InventoryService(branch_repo, room_type_repo, room_repo)

def get_reservation_service(clock=Depends(get_clock)) -> ReservationService:
    return ReservationService(reservation_repo, room_repo, room_type_repo, payment_repo, clock)

def get_expense_service() -> ExpenseService:
    return ExpenseService(expense_repo)

def get_occupancy_service(clock=Depends(get_clock)) -> OccupancyService:
    return OccupancyService(reservation_repo, room_repo, room_type_repo, clock, settings.DEFAULT_REPORT_DAYS)

def get_revenue_service(clock=Depends(get_clock)) -> RevenueService:
    return RevenueService(
        reservation_repo, room_repo, room_type_repo, branch_repo,
        ExpenseAggregator(expense_repo), clock, settings.DEFAULT_CURRENCY
    )

def get_dashboard_service(
    clock=Depends(get_clock),
    occupancy_service: OccupancyService = Depends(get_occupancy_service),
    revenue_service: RevenueService = Depends(get_revenue_service)
) -> DashboardService:
    return DashboardService(
        occupancy_service, revenue_service, ExpenseAggregator(expense_repo), clock,
        settings.DEFAULT_CURRENCY, settings.DEFAULT_REPORT_DAYS
    )

def get_breakdown_service() -> FinancialBreakdownService:
    return FinancialBreakdownService(reservation_repo, room_repo, room_type_repo)

def get_cash_flow_service(clock=Depends(get_clock)) -> CashFlowService:
    return CashFlowService(payment_repo, expense_repo, clock, settings.DEFAULT_CURRENCY)

def get_reception_service(clock=Depends(get_clock)) -> ReceptionService:
    return ReceptionService(reservation_repo, room_repo, room_type_repo, clock)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred"})

# ============================================================================
# HEALTH & ENUM REFERENCE ENDPOINTS
# ============================================================================

@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "API is running"}

@app.get("/api/enums/reservation-status", tags=["Enum Reference"])
async def get_reservation_statuses():
    """Get all ReservationStatus enum values"""
    return {
        "values": [item.value for item in ReservationStatus],
        "description": "Reservation lifecycle: DRAFT -> CONFIRMED -> CHECKED_IN -> CHECKED_OUT, or CANCELLED / NO_SHOW"
    }

@app.get("/api/enums/expense-category", tags=["Enum Reference"])
async def get_expense_categories():
    """Get all ExpenseCategory enum values"""
    return {
        "values": {item.name: item.value for item in ExpenseCategory},
        "description": "Expense categories by id"
    }

@app.get("/api/enums/reporting-mode", tags=["Enum Reference"])
async def get_reporting_modes():
    """Get all ReportingMode enum values"""
    return {
        "values": [item.value for item in ReportingMode],
        "description": "actual: realized stays; forecast: expected stays"
    }

@app.get("/api/enums/revenue-group-by", tags=["Enum Reference"])
async def get_revenue_group_by():
    """Get all RevenueGroupBy enum values"""
    return {
        "values": [item.value for item in RevenueGroupBy],
        "description": "Revenue grouping keys"
    }

# ============================================================================
# AUTH ENDPOINTS
# ============================================================================

@app.post("/token", response_model=Token, tags=["Auth"])
async def login_for_access_token(form_data: OAuth2PasswordRequestForm = Depends()):
    user = get_user(users_db, form_data.username)
    if not user or not verify_password(form_data.password, user.hashed_password):
        logger.warning("Failed login for %r", form_data.username)
        raise HTTPException(
            status_code=401,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    access_token_expires = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(
        data={"sub": user.username}, expires_delta=access_token_expires
    )
    return {"access_token": access_token, "token_type": "bearer"}

@app.get("/users/me", response_model=UserResponse, tags=["Auth"])
async def read_users_me(current_user: User = Depends(get_current_active_user)):
    return current_user

# ============================================================================
# INVENTORY ENDPOINTS
# ============================================================================

@app.post("/api/branches", response_model=BranchResponse, status_code=201, tags=["Inventory"])
async def create_branch(
    request: CreateBranchRequest,
    service: InventoryService = Depends(get_inventory_service),
    current_user: User = Depends(get_current_active_user)
):
    """Create branch"""
    try:
        branch = await service.create_branch(request.name)
        return BranchResponse(branch_id=branch.branch_id, name=branch.name)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.get("/api/branches", response_model=List[BranchResponse], tags=["Inventory"])
async def get_branches(
    service: InventoryService = Depends(get_inventory_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get all branches"""
    return [BranchResponse(branch_id=b.branch_id, name=b.name) for b in await service.get_all_branches()]

@app.post("/api/room-types", response_model=RoomTypeResponse, status_code=201, tags=["Inventory"])
async def create_room_type(
    request: CreateRoomTypeRequest,
    service: InventoryService = Depends(get_inventory_service),
    current_user: User = Depends(get_current_active_user)
):
    """Create room type"""
    room_type = await service.create_room_type(
        name=request.name,
        capacity=request.capacity,
        default_rate=request.default_rate,
        branch_id=request.branch_id
    )
    return RoomTypeResponse(**room_type.model_dump())

@app.get("/api/room-types", response_model=List[RoomTypeResponse], tags=["Inventory"])
async def get_room_types(
    service: InventoryService = Depends(get_inventory_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get all room types"""
    return [RoomTypeResponse(**rt.model_dump()) for rt in await service.get_all_room_types()]

@app.post("/api/rooms", response_model=RoomResponse, status_code=201, tags=["Inventory"])
async def create_room(
    request: CreateRoomRequest,
    service: InventoryService = Depends(get_inventory_service),
    current_user: User = Depends(get_current_active_user)
):
    """Create room"""
    try:
        room = await service.create_room(
            room_number=request.room_number,
            room_type_id=request.room_type_id,
            floor=request.floor,
            status=request.status,
            is_active=request.is_active,
            branch_id=request.branch_id
        )
        return RoomResponse(**room.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.get("/api/rooms", response_model=List[RoomResponse], tags=["Inventory"])
async def get_rooms(
    service: InventoryService = Depends(get_inventory_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get all rooms"""
    return [RoomResponse(**room.model_dump()) for room in await service.get_all_rooms()]

# ============================================================================
# RESERVATION ENDPOINTS
# ============================================================================

@app.post("/api/reservations", response_model=ReservationResponse, status_code=201, tags=["Reservations"])
async def create_reservation(
    request: CreateReservationRequest,
    service: ReservationService = Depends(get_reservation_service),
    current_user: User = Depends(get_current_active_user)
):
    """Create new reservation"""
    try:
        reservation = await service.create_reservation(
            guest_name=request.guest_name,
            check_in=request.check_in,
            check_out=request.check_out,
            lines=[line.model_dump() for line in request.lines],
            status=request.status,
            currency_code=request.currency_code,
            hotel_name=request.hotel_name,
            branch_id=request.branch_id or current_user.branch_id,
            phone=request.phone,
            nationality=request.nationality,
            booking_number=request.booking_number,
            balance_due=request.balance_due,
            payment_method=request.payment_method,
            paid_at_arrival=request.paid_at_arrival,
            notes=request.notes,
            created_by=current_user.username
        )
        return _reservation_to_response(reservation)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.get("/api/reservations", response_model=List[ReservationResponse], tags=["Reservations"])
async def get_all_reservations(
    service: ReservationService = Depends(get_reservation_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get all reservations"""
    reservations = await service.get_all_reservations()
    return [_reservation_to_response(r) for r in reservations]

@app.get("/api/reservations/{reservation_id}", response_model=ReservationResponse, tags=["Reservations"])
async def get_reservation(
    reservation_id: UUID,
    service: ReservationService = Depends(get_reservation_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get reservation by ID"""
    reservation = await service.get_reservation(reservation_id)
    if not reservation:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return _reservation_to_response(reservation)

@app.post("/api/reservations/{reservation_id}/confirm", response_model=ReservationResponse, tags=["Reservations"])
async def confirm_reservation(
    reservation_id: UUID,
    service: ReservationService = Depends(get_reservation_service),
    current_user: User = Depends(get_current_active_user)
):
    """Confirm a draft reservation"""
    return await _run_transition(service.confirm_reservation, reservation_id)

@app.post("/api/reservations/{reservation_id}/check-in", response_model=ReservationResponse, tags=["Reservations"])
async def check_in_reservation(
    reservation_id: UUID,
    service: ReservationService = Depends(get_reservation_service),
    current_user: User = Depends(get_current_active_user)
):
    """Check in guest"""
    return await _run_transition(service.check_in_reservation, reservation_id)

@app.post("/api/reservations/{reservation_id}/check-out", response_model=ReservationResponse, tags=["Reservations"])
async def check_out_reservation(
    reservation_id: UUID,
    service: ReservationService = Depends(get_reservation_service),
    current_user: User = Depends(get_current_active_user)
):
    """Check out guest"""
    return await _run_transition(service.check_out_reservation, reservation_id)

@app.post("/api/reservations/{reservation_id}/cancel", response_model=ReservationResponse, tags=["Reservations"])
async def cancel_reservation(
    reservation_id: UUID,
    service: ReservationService = Depends(get_reservation_service),
    current_user: User = Depends(get_current_active_user)
):
    """Cancel reservation"""
    return await _run_transition(service.cancel_reservation, reservation_id)

@app.post("/api/reservations/{reservation_id}/no-show", response_model=ReservationResponse, tags=["Reservations"])
async def mark_no_show(
    reservation_id: UUID,
    service: ReservationService = Depends(get_reservation_service),
    current_user: User = Depends(get_current_active_user)
):
    """Mark guest as no-show"""
    return await _run_transition(service.mark_no_show, reservation_id)

@app.delete("/api/reservations/{reservation_id}", response_model=ReservationResponse, tags=["Reservations"])
async def delete_reservation(
    reservation_id: UUID,
    request: Optional[DeleteReservationRequest] = None,
    service: ReservationService = Depends(get_reservation_service),
    current_user: User = Depends(get_current_active_user)
):
    """Soft delete a reservation"""
    try:
        reservation = await service.delete_reservation(
            reservation_id,
            deleted_by=current_user.username,
            reason=request.reason if request else None
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not reservation:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return _reservation_to_response(reservation)

@app.post("/api/reservations/{reservation_id}/payments", response_model=PaymentResponse, status_code=201, tags=["Reservations"])
async def record_payment(
    reservation_id: UUID,
    request: RecordPaymentRequest,
    service: ReservationService = Depends(get_reservation_service),
    current_user: User = Depends(get_current_active_user)
):
    """Record a payment against a reservation"""
    payment = await service.record_payment(
        reservation_id,
        amount=request.amount,
        payment_method=request.payment_method,
        currency_code=request.currency_code,
        notes=request.notes
    )
    if not payment:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return PaymentResponse(**payment.model_dump())

@app.get("/api/reservations/{reservation_id}/payments", response_model=List[PaymentResponse], tags=["Reservations"])
async def get_reservation_payments(
    reservation_id: UUID,
    service: ReservationService = Depends(get_reservation_service),
    current_user: User = Depends(get_current_active_user)
):
    """Payments taken against a reservation"""
    payments = await service.get_payments(reservation_id)
    if payments is None:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return [PaymentResponse(**p.model_dump()) for p in payments]

# ============================================================================
# EXPENSE ENDPOINTS
# ============================================================================

@app.post("/api/expenses", response_model=ExpenseResponse, status_code=201, tags=["Expenses"])
async def create_expense(
    request: CreateExpenseRequest,
    service: ExpenseService = Depends(get_expense_service),
    current_user: User = Depends(get_current_active_user)
):
    """Record an expense"""
    try:
        expense = await service.create_expense(
            business_date=request.business_date,
            category=request.category,
            amount=request.amount,
            description=request.description,
            currency_code=request.currency_code,
            currency_other=request.currency_other,
            payment_method=request.payment_method,
            vendor=request.vendor,
            branch_id=request.branch_id or current_user.branch_id
        )
        return ExpenseResponse(**expense.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.get("/api/expenses", response_model=ExpensesSummaryResponse, tags=["Expenses"])
async def get_expenses(
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    category: Optional[ExpenseCategory] = None,
    currency: Optional[CurrencyCode] = None,
    service: ExpenseService = Depends(get_expense_service),
    current_user: User = Depends(get_current_active_user)
):
    """List expenses, newest first, with the filtered total"""
    expenses, total = await service.list_expenses(date_from, date_to, category, currency)
    return ExpensesSummaryResponse(
        items=[ExpenseResponse(**e.model_dump()) for e in expenses],
        total_amount=total
    )

@app.get("/api/expenses/{expense_id}", response_model=ExpenseResponse, tags=["Expenses"])
async def get_expense(
    expense_id: UUID,
    service: ExpenseService = Depends(get_expense_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get expense by ID"""
    expense = await service.get_expense(expense_id)
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    return ExpenseResponse(**expense.model_dump())

# ============================================================================
# REPORTING ENDPOINTS
# ============================================================================

@app.get("/api/occupancy", response_model=OccupancySummary, tags=["Reporting"])
async def get_occupancy(
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to", description="Last night included"),
    mode: ReportingMode = ReportingMode.FORECAST,
    group_by: OccupancyGroupBy = Query(OccupancyGroupBy.BOTH, alias="groupBy"),
    service: OccupancyService = Depends(get_occupancy_service),
    current_user: User = Depends(get_current_active_user)
):
    """Night-by-night occupancy"""
    return await service.get_occupancy(date_from, date_to, mode, group_by)

@app.get("/api/financials/revenue", response_model=RevenueSummary, tags=["Reporting"])
async def get_revenue_summary(
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to", description="Last night included"),
    mode: ReportingMode = ReportingMode.FORECAST,
    group_by: RevenueGroupBy = Query(RevenueGroupBy.DAY, alias="groupBy"),
    currency: Optional[CurrencyCode] = None,
    service: RevenueService = Depends(get_revenue_service),
    current_user: User = Depends(get_current_active_user)
):
    """Prorated revenue grouped by day, room type, room, branch or hotel"""
    return await service.get_revenue_summary(date_from, date_to, mode, group_by, currency)

@app.get("/api/financials/reservations/{reservation_id}/breakdown",
         response_model=ReservationFinancialBreakdown, tags=["Reporting"])
async def get_reservation_breakdown(
    reservation_id: UUID,
    service: FinancialBreakdownService = Depends(get_breakdown_service),
    current_user: User = Depends(get_current_active_user)
):
    """Lines and nightly allocation of one reservation"""
    breakdown = await service.get_breakdown(reservation_id)
    if not breakdown:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return breakdown

@app.get("/api/dashboard", response_model=Dashboard, tags=["Reporting"])
async def get_dashboard(
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to", description="Exclusive end"),
    mode: ReportingMode = ReportingMode.FORECAST,
    include_room_type_breakdown: bool = Query(True, alias="includeRoomTypeBreakdown"),
    currency: Optional[CurrencyCode] = None,
    service: DashboardService = Depends(get_dashboard_service),
    current_user: User = Depends(get_current_active_user)
):
    """Occupancy, revenue, expenses and KPIs (ADR, RevPAR, net profit)"""
    return await service.get_dashboard(date_from, date_to, mode, include_room_type_breakdown, currency)

@app.get("/api/dashboard/cash-flow", response_model=DailyCashFlow, tags=["Reporting"])
async def get_daily_cash_flow(
    business_date: Optional[date] = Query(None, alias="businessDate"),
    currency: Optional[CurrencyCode] = None,
    service: CashFlowService = Depends(get_cash_flow_service),
    current_user: User = Depends(get_current_active_user)
):
    """Net cash in drawer for a business date"""
    return await service.get_daily_cash_flow(business_date, currency)

# ============================================================================
# RECEPTION ENDPOINTS
# ============================================================================

@app.get("/api/reception/today", response_model=ReceptionToday, tags=["Reception"])
async def get_reception_today(
    business_date: Optional[date] = Query(None, alias="date"),
    service: ReceptionService = Depends(get_reception_service),
    current_user: User = Depends(get_current_active_user)
):
    """Arrivals, departures and in-house guests for a business date"""
    return await service.get_today(business_date)

@app.get("/api/reception/rooms-status", response_model=ReceptionRoomsStatus, tags=["Reception"])
async def get_reception_rooms_status(
    business_date: Optional[date] = Query(None, alias="date"),
    service: ReceptionService = Depends(get_reception_service),
    current_user: User = Depends(get_current_active_user)
):
    """Room board: who holds each active room on a business date"""
    return await service.get_rooms_status(business_date)

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

async def _run_transition(action, reservation_id: UUID) -> ReservationResponse:
    try:
        reservation = await action(reservation_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not reservation:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return _reservation_to_response(reservation)

def _reservation_to_response(reservation) -> ReservationResponse:
    """Convert Reservation entity to ReservationResponse"""
    return ReservationResponse(
        reservation_id=reservation.reservation_id,
        branch_id=reservation.branch_id,
        guest_name=reservation.guest_name,
        check_in=reservation.date_range.check_in,
        check_out=reservation.date_range.check_out,
        nights=reservation.get_nights(),
        status=reservation.status,
        total_amount=reservation.total_amount,
        currency_code=reservation.currency_code,
        hotel_name=reservation.hotel_name,
        balance_due=reservation.balance_due,
        payment_method=reservation.payment_method,
        source=reservation.source,
        lines=[ReservationLineResponse(**line.model_dump()) for line in reservation.lines],
        confirmed_at=reservation.confirmed_at,
        checked_in_at=reservation.checked_in_at,
        checked_out_at=reservation.checked_out_at,
        cancelled_at=reservation.cancelled_at,
        no_show_at=reservation.no_show_at,
        is_late_check_out=(
            reservation.status == ReservationStatus.CHECKED_IN
            and hotel_clock.is_late_check_out(reservation.date_range.check_out)
        ),
        is_deleted=reservation.is_deleted,
        created_at=reservation.created_at,
        modified_at=reservation.modified_at,
        created_by=reservation.created_by,
        version=reservation.version
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
