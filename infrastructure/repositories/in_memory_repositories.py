"""In-Memory Repository Implementations"""
from typing import Optional, List, Dict, Iterable
from uuid import UUID
from datetime import date, datetime

from domain.repositories import (
    BranchRepository, RoomTypeRepository, RoomRepository,
    ReservationRepository, ExpenseRepository, PaymentRepository
)
from domain.entities import Branch, RoomType, Room, Reservation, Expense, Payment
from domain.enums import ReservationStatus, CurrencyCode, PaymentMethod


class InMemoryBranchRepository(BranchRepository):
    """In-memory implementation of BranchRepository"""

    def __init__(self):
        self._storage: Dict[UUID, Branch] = {}

    async def save(self, branch: Branch) -> Branch:
        self._storage[branch.branch_id] = branch
        return branch

    async def find_by_id(self, branch_id: UUID) -> Optional[Branch]:
        return self._storage.get(branch_id)

    async def find_all(self) -> List[Branch]:
        return list(self._storage.values())


class InMemoryRoomTypeRepository(RoomTypeRepository):
    """In-memory implementation of RoomTypeRepository"""

    def __init__(self):
        self._storage: Dict[UUID, RoomType] = {}

    async def save(self, room_type: RoomType) -> RoomType:
        self._storage[room_type.room_type_id] = room_type
        return room_type

    async def find_by_id(self, room_type_id: UUID) -> Optional[RoomType]:
        return self._storage.get(room_type_id)

    async def find_all(self) -> List[RoomType]:
        return list(self._storage.values())


class InMemoryRoomRepository(RoomRepository):
    """In-memory implementation of RoomRepository"""

    def __init__(self):
        self._storage: Dict[UUID, Room] = {}

    async def save(self, room: Room) -> Room:
        self._storage[room.room_id] = room
        return room

    async def find_by_id(self, room_id: UUID) -> Optional[Room]:
        return self._storage.get(room_id)

    async def find_all(self) -> List[Room]:
        return sorted(self._storage.values(), key=lambda r: r.room_number)

    async def count_active(self, exclude_out_of_service: bool = True) -> int:
        if exclude_out_of_service:
            return sum(1 for r in self._storage.values() if r.counts_as_supply())
        return sum(1 for r in self._storage.values() if r.is_active)


class InMemoryReservationRepository(ReservationRepository):
    """In-memory implementation of ReservationRepository"""

    def __init__(self):
        self._storage: Dict[UUID, Reservation] = {}

    async def save(self, reservation: Reservation) -> Reservation:
        """Save reservation to memory"""
        self._storage[reservation.reservation_id] = reservation
        return reservation

    async def find_by_id(self, reservation_id: UUID) -> Optional[Reservation]:
        """Find reservation by ID"""
        return self._storage.get(reservation_id)

    async def find_all(self) -> List[Reservation]:
        """Find all reservations that are not soft-deleted"""
        return [r for r in self._storage.values() if not r.is_deleted]

    async def update(self, reservation: Reservation) -> Reservation:
        """Update reservation"""
        if reservation.reservation_id in self._storage:
            self._storage[reservation.reservation_id] = reservation
            return reservation
        raise ValueError("Reservation not found")

    async def find_overlapping(
        self,
        start: date,
        end: date,
        statuses: Iterable[ReservationStatus],
        currency: Optional[CurrencyCode] = None
    ) -> List[Reservation]:
        """Find live reservations whose stay shares a night with [start, end)"""
        wanted = set(statuses)
        return [
            r for r in self._storage.values()
            if not r.is_deleted
            and r.status in wanted
            and (currency is None or r.currency_code == currency)
            and r.date_range.overlaps(start, end)
        ]


class InMemoryExpenseRepository(ExpenseRepository):
    """In-memory implementation of ExpenseRepository"""

    def __init__(self):
        self._storage: Dict[UUID, Expense] = {}

    async def save(self, expense: Expense) -> Expense:
        self._storage[expense.expense_id] = expense
        return expense

    async def find_by_id(self, expense_id: UUID) -> Optional[Expense]:
        return self._storage.get(expense_id)

    async def find_by_business_date_range(
        self,
        start: Optional[date],
        end: Optional[date],
        currency: Optional[CurrencyCode] = None
    ) -> List[Expense]:
        return [
            e for e in self._storage.values()
            if (start is None or e.business_date >= start)
            and (end is None or e.business_date <= end)
            and (currency is None or e.currency_code == currency)
        ]


class InMemoryPaymentRepository(PaymentRepository):
    """In-memory implementation of PaymentRepository"""

    def __init__(self):
        self._storage: Dict[UUID, Payment] = {}

    async def save(self, payment: Payment) -> Payment:
        self._storage[payment.payment_id] = payment
        return payment

    async def find_by_reservation(self, reservation_id: UUID) -> List[Payment]:
        return [p for p in self._storage.values() if p.reservation_id == reservation_id]

    async def find_created_between(
        self,
        start: datetime,
        end: datetime,
        currency: CurrencyCode,
        method: Optional[PaymentMethod] = None
    ) -> List[Payment]:
        return [
            p for p in self._storage.values()
            if start <= p.created_at < end
            and p.currency_code == currency
            and (method is None or p.payment_method == method)
        ]
