"""Domain Repository Interfaces"""
from abc import ABC, abstractmethod
from typing import Optional, List, Iterable
from uuid import UUID
from datetime import date, datetime

from domain.entities import Branch, RoomType, Room, Reservation, Expense, Payment
from domain.enums import ReservationStatus, CurrencyCode, PaymentMethod


class BranchRepository(ABC):
    """Repository interface for Branch"""

    @abstractmethod
    async def save(self, branch: Branch) -> Branch:
        pass

    @abstractmethod
    async def find_by_id(self, branch_id: UUID) -> Optional[Branch]:
        pass

    @abstractmethod
    async def find_all(self) -> List[Branch]:
        pass


class RoomTypeRepository(ABC):
    """Repository interface for RoomType"""

    @abstractmethod
    async def save(self, room_type: RoomType) -> RoomType:
        pass

    @abstractmethod
    async def find_by_id(self, room_type_id: UUID) -> Optional[RoomType]:
        pass

    @abstractmethod
    async def find_all(self) -> List[RoomType]:
        pass


class RoomRepository(ABC):
    """Repository interface for Room"""

    @abstractmethod
    async def save(self, room: Room) -> Room:
        pass

    @abstractmethod
    async def find_by_id(self, room_id: UUID) -> Optional[Room]:
        pass

    @abstractmethod
    async def find_all(self) -> List[Room]:
        pass

    @abstractmethod
    async def count_active(self, exclude_out_of_service: bool = True) -> int:
        """Count active rooms, optionally leaving out rooms that are out of service"""
        pass


class ReservationRepository(ABC):
    """Repository interface for Reservation Aggregate"""

    @abstractmethod
    async def save(self, reservation: Reservation) -> Reservation:
        """Save reservation"""
        pass

    @abstractmethod
    async def find_by_id(self, reservation_id: UUID) -> Optional[Reservation]:
        """Find reservation by ID"""
        pass

    @abstractmethod
    async def find_all(self) -> List[Reservation]:
        """Find all reservations that are not soft-deleted"""
        pass

    @abstractmethod
    async def update(self, reservation: Reservation) -> Reservation:
        """Update reservation"""
        pass

    @abstractmethod
    async def find_overlapping(
        self,
        start: date,
        end: date,
        statuses: Iterable[ReservationStatus],
        currency: Optional[CurrencyCode] = None
    ) -> List[Reservation]:
        """Reservations with check_in < end and check_out > start, soft-deleted excluded"""
        pass


class ExpenseRepository(ABC):
    """Repository interface for Expense"""

    @abstractmethod
    async def save(self, expense: Expense) -> Expense:
        pass

    @abstractmethod
    async def find_by_id(self, expense_id: UUID) -> Optional[Expense]:
        pass

    @abstractmethod
    async def find_by_business_date_range(
        self,
        start: Optional[date],
        end: Optional[date],
        currency: Optional[CurrencyCode] = None
    ) -> List[Expense]:
        """Expenses with start <= business_date <= end; a missing bound is open"""
        pass


class PaymentRepository(ABC):
    """Repository interface for Payment"""

    @abstractmethod
    async def save(self, payment: Payment) -> Payment:
        pass

    @abstractmethod
    async def find_by_reservation(self, reservation_id: UUID) -> List[Payment]:
        pass

    @abstractmethod
    async def find_created_between(
        self,
        start: datetime,
        end: datetime,
        currency: CurrencyCode,
        method: Optional[PaymentMethod] = None
    ) -> List[Payment]:
        """Payments with start <= created_at < end"""
        pass
