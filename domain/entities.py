"""Domain Entities - Aggregates"""
from pydantic import BaseModel, Field, validator
from uuid import UUID, uuid4
from datetime import datetime, date, timezone
from typing import Optional, List
from decimal import Decimal

from domain.enums import (
    ReservationStatus, ReservationSource, RoomStatus, CurrencyCode,
    PaymentMethod, ExpenseCategory
)
from domain.value_objects import DateRange


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Branch(BaseModel):
    """Branch (property) Entity"""
    branch_id: UUID = Field(default_factory=uuid4)
    name: str = Field(min_length=1, max_length=120)

    @validator('name')
    def name_not_blank(cls, v):
        if not v.strip():
            raise ValueError('Branch name cannot be empty')
        return v

    class Config:
        from_attributes = True


class RoomType(BaseModel):
    """Room Type Entity"""
    room_type_id: UUID = Field(default_factory=uuid4)
    branch_id: Optional[UUID] = None
    name: str = Field(min_length=1, max_length=120)
    capacity: int = Field(ge=1, default=2)
    default_rate: Decimal = Field(ge=0, default=Decimal("0"))
    is_active: bool = True

    class Config:
        from_attributes = True


class Room(BaseModel):
    """Room Entity"""
    room_id: UUID = Field(default_factory=uuid4)
    branch_id: Optional[UUID] = None
    room_number: str = Field(min_length=1, max_length=20)
    room_type_id: UUID
    floor: Optional[int] = None
    status: RoomStatus = RoomStatus.AVAILABLE
    is_active: bool = True

    def counts_as_supply(self) -> bool:
        """Active rooms that are not out of service are sellable inventory"""
        return self.is_active and self.status != RoomStatus.OUT_OF_SERVICE

    class Config:
        from_attributes = True


class ReservationLine(BaseModel):
    """Child Entity - one room booked within a reservation"""
    line_id: UUID = Field(default_factory=uuid4)
    room_id: UUID
    room_type_id: UUID
    rate_per_night: Decimal = Field(ge=0)
    nights: int = Field(ge=1)
    line_total: Decimal = Field(ge=0)

    class Config:
        from_attributes = True


class Reservation(BaseModel):
    """Reservation Aggregate Root Entity"""

    # Identity
    reservation_id: UUID = Field(default_factory=uuid4)
    branch_id: Optional[UUID] = None
    source: ReservationSource = ReservationSource.MANUAL
    booking_number: Optional[str] = None

    # Guest
    guest_name: str = Field(min_length=1, max_length=150)
    phone: Optional[str] = None
    nationality: Optional[str] = None

    # Stay & money
    date_range: DateRange
    total_amount: Decimal = Field(ge=0)
    currency_code: CurrencyCode = CurrencyCode.EGP
    hotel_name: Optional[str] = Field(None, max_length=120)
    balance_due: Decimal = Field(ge=0, default=Decimal("0"))
    payment_method: PaymentMethod = PaymentMethod.CASH
    paid_at_arrival: bool = True
    notes: Optional[str] = None

    status: ReservationStatus = ReservationStatus.DRAFT
    lines: List[ReservationLine] = []

    # Lifecycle timestamps
    confirmed_at: Optional[datetime] = None
    checked_in_at: Optional[datetime] = None
    checked_out_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    no_show_at: Optional[datetime] = None

    # Soft delete
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[str] = None
    delete_reason: Optional[str] = None

    # Metadata
    created_at: datetime = Field(default_factory=_utcnow)
    modified_at: datetime = Field(default_factory=_utcnow)
    created_by: str = "SYSTEM"
    version: int = 1

    class Config:
        from_attributes = True

    # ==================== STATE TRANSITION METHODS ====================
    def confirm(self, confirmed_at: datetime) -> None:
        """Confirm a draft reservation"""
        if self.status != ReservationStatus.DRAFT:
            self._invalid_transition(ReservationStatus.CONFIRMED)
        self.status = ReservationStatus.CONFIRMED
        self.confirmed_at = confirmed_at
        self._touch()

    def check_in(self, checked_in_at: datetime) -> None:
        """Mark guest as checked in"""
        if self.status not in [ReservationStatus.DRAFT, ReservationStatus.CONFIRMED]:
            self._invalid_transition(ReservationStatus.CHECKED_IN)
        self.status = ReservationStatus.CHECKED_IN
        self.checked_in_at = checked_in_at
        self._touch()

    def check_out(self, checked_out_at: datetime) -> None:
        """Process guest check-out"""
        if self.status != ReservationStatus.CHECKED_IN:
            self._invalid_transition(ReservationStatus.CHECKED_OUT)
        self.status = ReservationStatus.CHECKED_OUT
        self.checked_out_at = checked_out_at
        self._touch()

    def cancel(self, cancelled_at: datetime) -> None:
        """Cancel reservation"""
        if self.status not in [ReservationStatus.DRAFT, ReservationStatus.CONFIRMED]:
            self._invalid_transition(ReservationStatus.CANCELLED)
        self.status = ReservationStatus.CANCELLED
        self.cancelled_at = cancelled_at
        self._touch()

    def mark_no_show(self, no_show_at: datetime) -> None:
        """Mark guest as no-show"""
        if self.status not in [ReservationStatus.DRAFT, ReservationStatus.CONFIRMED]:
            self._invalid_transition(ReservationStatus.NO_SHOW)
        self.status = ReservationStatus.NO_SHOW
        self.no_show_at = no_show_at
        self._touch()

    def mark_as_deleted(self, deleted_at: datetime, deleted_by: Optional[str], reason: Optional[str]) -> None:
        """Soft delete; completed stays are kept for reporting"""
        if self.is_deleted:
            raise ValueError("Reservation is already deleted")
        if self.status == ReservationStatus.CHECKED_OUT:
            raise ValueError(
                "Cannot delete a checked-out reservation. Completed stays must be preserved"
            )
        self.is_deleted = True
        self.deleted_at = deleted_at
        self.deleted_by = deleted_by
        self.delete_reason = reason
        self._touch()

    # ==================== QUERY METHODS ====================
    def get_nights(self) -> int:
        """Get number of nights"""
        return self.date_range.nights()

    def room_ids(self) -> List[UUID]:
        return [line.room_id for line in self.lines]

    def validate_for_booking(self) -> None:
        """A reservation must book at least one room"""
        if not self.lines:
            raise ValueError("At least one room must be selected")

    # ==================== PRIVATE METHODS ====================
    def _invalid_transition(self, target: ReservationStatus) -> None:
        raise ValueError(
            f"Cannot transition from {self.status.value} to {target.value}"
        )

    def _touch(self) -> None:
        self.modified_at = _utcnow()
        self.version += 1


class Expense(BaseModel):
    """Expense Entity - booked against a business date, never prorated"""
    expense_id: UUID = Field(default_factory=uuid4)
    branch_id: Optional[UUID] = None
    business_date: date
    category: ExpenseCategory
    amount: Decimal = Field(gt=0)
    currency_code: CurrencyCode = CurrencyCode.EGP
    currency_other: Optional[str] = Field(None, max_length=12)
    payment_method: PaymentMethod = PaymentMethod.CASH
    description: str = Field(min_length=1, max_length=200)
    vendor: Optional[str] = Field(None, max_length=120)
    created_at: datetime = Field(default_factory=_utcnow)

    @validator('description')
    def description_not_blank(cls, v):
        if not v.strip():
            raise ValueError('Description is required')
        return v

    def check_currency(self) -> None:
        """currency_other is required for OTHER and forbidden otherwise"""
        if self.currency_code == CurrencyCode.OTHER and not (self.currency_other and self.currency_other.strip()):
            raise ValueError("currency_other is required when currency_code is OTHER")
        if self.currency_code != CurrencyCode.OTHER and self.currency_other:
            raise ValueError("currency_other must be empty unless currency_code is OTHER")

    class Config:
        from_attributes = True


class Payment(BaseModel):
    """Payment Entity - money received against a reservation"""
    payment_id: UUID = Field(default_factory=uuid4)
    reservation_id: UUID
    branch_id: Optional[UUID] = None
    amount: Decimal = Field(gt=0)
    currency_code: CurrencyCode = CurrencyCode.EGP
    payment_method: PaymentMethod = PaymentMethod.CASH
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)

    class Config:
        from_attributes = True
