"""API Schemas - Request and Response DTOs"""
from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from typing import List, Optional

from domain.enums import (
    ReservationStatus, ReservationSource, RoomStatus, CurrencyCode,
    PaymentMethod, ExpenseCategory
)


# ============================================================================
# INVENTORY SCHEMAS
# ============================================================================

class CreateBranchRequest(BaseModel):
    """Create branch request DTO"""
    name: str = Field(min_length=1, max_length=120)


class BranchResponse(BaseModel):
    """Branch response DTO"""
    branch_id: UUID
    name: str


class CreateRoomTypeRequest(BaseModel):
    """Create room type request DTO"""
    name: str = Field(min_length=1, max_length=120)
    capacity: int = Field(ge=1, default=2)
    default_rate: Decimal = Field(ge=0, default=Decimal("0"))
    branch_id: Optional[UUID] = None


class RoomTypeResponse(BaseModel):
    """Room type response DTO"""
    room_type_id: UUID
    branch_id: Optional[UUID] = None
    name: str
    capacity: int
    default_rate: Decimal
    is_active: bool


class CreateRoomRequest(BaseModel):
    """Create room request DTO"""
    room_number: str = Field(min_length=1, max_length=20)
    room_type_id: UUID
    floor: Optional[int] = None
    status: RoomStatus = RoomStatus.AVAILABLE
    is_active: bool = True
    branch_id: Optional[UUID] = None


class RoomResponse(BaseModel):
    """Room response DTO"""
    room_id: UUID
    branch_id: Optional[UUID] = None
    room_number: str
    room_type_id: UUID
    floor: Optional[int] = None
    status: RoomStatus
    is_active: bool


# ============================================================================
# RESERVATION SCHEMAS
# ============================================================================

class ReservationLineRequest(BaseModel):
    """One booked room; the room type's default rate applies when no rate is given"""
    room_id: UUID
    rate_per_night: Optional[Decimal] = Field(None, ge=0)


class CreateReservationRequest(BaseModel):
    """Create reservation request DTO"""
    guest_name: str = Field(min_length=1, max_length=150)
    check_in: date
    check_out: date
    lines: List[ReservationLineRequest] = Field(min_length=1)
    status: ReservationStatus = ReservationStatus.DRAFT
    currency_code: CurrencyCode = CurrencyCode.EGP
    hotel_name: Optional[str] = Field(None, max_length=120)
    branch_id: Optional[UUID] = None
    phone: Optional[str] = None
    nationality: Optional[str] = None
    booking_number: Optional[str] = None
    balance_due: Decimal = Field(ge=0, default=Decimal("0"))
    payment_method: PaymentMethod = PaymentMethod.CASH
    paid_at_arrival: bool = True
    notes: Optional[str] = None


class DeleteReservationRequest(BaseModel):
    """Soft delete request DTO"""
    reason: Optional[str] = Field(None, max_length=500)


class RecordPaymentRequest(BaseModel):
    """Record payment request DTO"""
    amount: Decimal = Field(gt=0)
    payment_method: PaymentMethod = PaymentMethod.CASH
    currency_code: Optional[CurrencyCode] = None
    notes: Optional[str] = None


class ReservationLineResponse(BaseModel):
    """Reservation line response DTO"""
    line_id: UUID
    room_id: UUID
    room_type_id: UUID
    rate_per_night: Decimal
    nights: int
    line_total: Decimal


class ReservationResponse(BaseModel):
    """Reservation response DTO"""
    reservation_id: UUID
    branch_id: Optional[UUID] = None
    guest_name: str
    check_in: date
    check_out: date
    nights: int
    status: ReservationStatus
    total_amount: Decimal
    currency_code: CurrencyCode
    hotel_name: Optional[str] = None
    balance_due: Decimal
    payment_method: PaymentMethod
    source: ReservationSource
    lines: List[ReservationLineResponse]
    confirmed_at: Optional[datetime] = None
    checked_in_at: Optional[datetime] = None
    checked_out_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    no_show_at: Optional[datetime] = None
    is_late_check_out: bool = False
    is_deleted: bool
    created_at: datetime
    modified_at: datetime
    created_by: str
    version: int


class PaymentResponse(BaseModel):
    """Payment response DTO"""
    payment_id: UUID
    reservation_id: UUID
    amount: Decimal
    currency_code: CurrencyCode
    payment_method: PaymentMethod
    notes: Optional[str] = None
    created_at: datetime


# ============================================================================
# EXPENSE SCHEMAS
# ============================================================================

class CreateExpenseRequest(BaseModel):
    """Create expense request DTO"""
    business_date: date
    category: ExpenseCategory
    amount: Decimal = Field(gt=0)
    currency_code: CurrencyCode = CurrencyCode.EGP
    currency_other: Optional[str] = Field(None, max_length=12)
    payment_method: PaymentMethod = PaymentMethod.CASH
    description: str = Field(min_length=1, max_length=200)
    vendor: Optional[str] = Field(None, max_length=120)
    branch_id: Optional[UUID] = None


class ExpenseResponse(BaseModel):
    """Expense response DTO"""
    expense_id: UUID
    business_date: date
    category: ExpenseCategory
    amount: Decimal
    currency_code: CurrencyCode
    currency_other: Optional[str] = None
    payment_method: PaymentMethod
    description: str
    vendor: Optional[str] = None
    created_at: datetime


class ExpensesSummaryResponse(BaseModel):
    """Filtered expenses with their total"""
    items: List[ExpenseResponse]
    total_amount: Decimal


# ============================================================================
# AUTH SCHEMAS
# ============================================================================

class Token(BaseModel):
    access_token: str
    token_type: str


class TokenData(BaseModel):
    username: Optional[str] = None


class UserResponse(BaseModel):
    user_id: UUID
    username: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    roles: List[str] = []
    disabled: Optional[bool] = None
