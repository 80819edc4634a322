"""Application Services - Business use cases"""
import logging
from uuid import UUID
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import List, Optional

from application.dtos import DailyCashFlow
from application.interfaces import DateTimeProvider
from domain.repositories import (
    BranchRepository, RoomTypeRepository, RoomRepository,
    ReservationRepository, ExpenseRepository, PaymentRepository
)
from domain.entities import Branch, RoomType, Room, Reservation, ReservationLine, Payment
from domain.enums import (
    ReservationStatus, ReservationSource, RoomStatus, CurrencyCode, PaymentMethod
)
from domain.financials import ZERO, calculate_nights, calculate_line_total, calculate_total_amount, round_money
from domain.policies import BLOCKING_STATUSES, is_blocking
from domain.value_objects import DateRange

logger = logging.getLogger(__name__)


class InventoryService:
    """Service for branches, room types and rooms"""

    def __init__(self,
                 branch_repo: BranchRepository,
                 room_type_repo: RoomTypeRepository,
                 room_repo: RoomRepository):
        self.branch_repo = branch_repo
        self.room_type_repo = room_type_repo
        self.room_repo = room_repo

    async def create_branch(self, name: str) -> Branch:
        return await self.branch_repo.save(Branch(name=name))

    async def get_all_branches(self) -> List[Branch]:
        return await self.branch_repo.find_all()

    async def create_room_type(
        self,
        name: str,
        capacity: int = 2,
        default_rate: Decimal = Decimal("0"),
        branch_id: Optional[UUID] = None
    ) -> RoomType:
        room_type = RoomType(name=name, capacity=capacity, default_rate=default_rate, branch_id=branch_id)
        return await self.room_type_repo.save(room_type)

    async def get_all_room_types(self) -> List[RoomType]:
        return await self.room_type_repo.find_all()

    async def create_room(
        self,
        room_number: str,
        room_type_id: UUID,
        floor: Optional[int] = None,
        status: RoomStatus = RoomStatus.AVAILABLE,
        is_active: bool = True,
        branch_id: Optional[UUID] = None
    ) -> Room:
        """Add a room of an existing room type"""
        if not await self.room_type_repo.find_by_id(room_type_id):
            raise ValueError("Room type not found")
        room = Room(
            room_number=room_number,
            room_type_id=room_type_id,
            floor=floor,
            status=status,
            is_active=is_active,
            branch_id=branch_id
        )
        return await self.room_repo.save(room)

    async def get_all_rooms(self) -> List[Room]:
        return await self.room_repo.find_all()


class ReservationService:
    """Service for Reservation business use cases"""

    def __init__(self,
                 repository: ReservationRepository,
                 room_repo: RoomRepository,
                 room_type_repo: RoomTypeRepository,
                 payment_repo: PaymentRepository,
                 clock: DateTimeProvider):
        self.repository = repository
        self.room_repo = room_repo
        self.room_type_repo = room_type_repo
        self.payment_repo = payment_repo
        self.clock = clock

    async def create_reservation(
        self,
        guest_name: str,
        check_in: date,
        check_out: date,
        lines: List[dict],
        status: ReservationStatus = ReservationStatus.DRAFT,
        currency_code: CurrencyCode = CurrencyCode.EGP,
        hotel_name: Optional[str] = None,
        branch_id: Optional[UUID] = None,
        phone: Optional[str] = None,
        nationality: Optional[str] = None,
        booking_number: Optional[str] = None,
        balance_due: Decimal = Decimal("0"),
        payment_method: PaymentMethod = PaymentMethod.CASH,
        paid_at_arrival: bool = True,
        source: ReservationSource = ReservationSource.MANUAL,
        notes: Optional[str] = None,
        created_by: str = "SYSTEM"
    ) -> Reservation:
        """Create a reservation; ``lines`` holds ``{"room_id", "rate_per_night"?}`` dicts"""
        date_range = DateRange(check_in=check_in, check_out=check_out)
        if not lines:
            raise ValueError("At least one room must be selected")

        rooms: List[Room] = []
        for item in lines:
            room = await self.room_repo.find_by_id(item["room_id"])
            if not room:
                raise ValueError("One or more selected rooms do not exist")
            if not room.is_active:
                raise ValueError(f"Room {room.room_number} is not active")
            rooms.append(room)

        if is_blocking(status):
            await self._ensure_rooms_free(rooms, date_range)

        nights = calculate_nights(check_in, check_out)
        reservation_lines = []
        for item, room in zip(lines, rooms):
            rate = item.get("rate_per_night")
            if rate is None:
                room_type = await self.room_type_repo.find_by_id(room.room_type_id)
                rate = room_type.default_rate if room_type else Decimal("0")
            rate = round_money(rate)
            reservation_lines.append(ReservationLine(
                room_id=room.room_id,
                room_type_id=room.room_type_id,
                rate_per_night=rate,
                nights=nights,
                line_total=calculate_line_total(rate, nights)
            ))

        now = self.clock.now()
        reservation = Reservation(
            branch_id=branch_id,
            source=source,
            booking_number=booking_number,
            guest_name=guest_name,
            phone=phone,
            nationality=nationality,
            date_range=date_range,
            total_amount=calculate_total_amount(reservation_lines),
            currency_code=currency_code,
            hotel_name=hotel_name,
            balance_due=balance_due,
            payment_method=payment_method,
            paid_at_arrival=paid_at_arrival,
            notes=notes,
            status=status,
            lines=reservation_lines,
            confirmed_at=now if status == ReservationStatus.CONFIRMED else None,
            created_by=created_by
        )
        reservation.validate_for_booking()

        saved = await self.repository.save(reservation)
        logger.info(
            "Reservation %s created: %s..%s status=%s total=%s %s",
            saved.reservation_id, check_in, check_out, status.value,
            saved.total_amount, currency_code.value
        )
        return saved

    async def get_reservation(self, reservation_id: UUID) -> Optional[Reservation]:
        """Get reservation by ID"""
        return await self.repository.find_by_id(reservation_id)

    async def get_all_reservations(self) -> List[Reservation]:
        """Get all live reservations"""
        return await self.repository.find_all()

    async def confirm_reservation(self, reservation_id: UUID) -> Optional[Reservation]:
        return await self._transition(reservation_id, "confirm")

    async def check_in_reservation(self, reservation_id: UUID) -> Optional[Reservation]:
        return await self._transition(reservation_id, "check_in")

    async def check_out_reservation(self, reservation_id: UUID) -> Optional[Reservation]:
        return await self._transition(reservation_id, "check_out")

    async def cancel_reservation(self, reservation_id: UUID) -> Optional[Reservation]:
        return await self._transition(reservation_id, "cancel")

    async def mark_no_show(self, reservation_id: UUID) -> Optional[Reservation]:
        return await self._transition(reservation_id, "mark_no_show")

    async def delete_reservation(
        self,
        reservation_id: UUID,
        deleted_by: Optional[str] = None,
        reason: Optional[str] = None
    ) -> Optional[Reservation]:
        """Soft delete a reservation"""
        reservation = await self.repository.find_by_id(reservation_id)
        if not reservation:
            return None
        reservation.mark_as_deleted(self.clock.now(), deleted_by, reason)
        logger.info("Reservation %s deleted by %s: %s", reservation_id, deleted_by, reason)
        return await self.repository.update(reservation)

    async def record_payment(
        self,
        reservation_id: UUID,
        amount: Decimal,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        currency_code: Optional[CurrencyCode] = None,
        notes: Optional[str] = None
    ) -> Optional[Payment]:
        """Take a payment against a reservation, in its currency unless told otherwise"""
        reservation = await self.repository.find_by_id(reservation_id)
        if not reservation or reservation.is_deleted:
            return None
        payment = Payment(
            reservation_id=reservation_id,
            branch_id=reservation.branch_id,
            amount=amount,
            currency_code=currency_code or reservation.currency_code,
            payment_method=payment_method,
            notes=notes
        )
        return await self.payment_repo.save(payment)

    async def get_payments(self, reservation_id: UUID) -> Optional[List[Payment]]:
        if not await self.repository.find_by_id(reservation_id):
            return None
        payments = await self.payment_repo.find_by_reservation(reservation_id)
        return sorted(payments, key=lambda p: p.created_at)

    async def _transition(self, reservation_id: UUID, action: str) -> Optional[Reservation]:
        reservation = await self.repository.find_by_id(reservation_id)
        if not reservation or reservation.is_deleted:
            return None
        getattr(reservation, action)(self.clock.now())
        logger.info("Reservation %s -> %s", reservation_id, reservation.status.value)
        return await self.repository.update(reservation)

    async def _ensure_rooms_free(self, rooms: List[Room], date_range: DateRange) -> None:
        """No two blocking reservations may hold one room on the same night"""
        overlapping = await self.repository.find_overlapping(
            date_range.check_in, date_range.check_out, BLOCKING_STATUSES
        )
        taken = {room_id for r in overlapping for room_id in r.room_ids()}
        for room in rooms:
            if room.room_id in taken:
                raise ValueError(
                    f"Room {room.room_number} is not available between "
                    f"{date_range.check_in.isoformat()} and {date_range.check_out.isoformat()}"
                )


class CashFlowService:
    """Cash in the drawer for one business date"""

    def __init__(self,
                 payment_repo: PaymentRepository,
                 expense_repo: ExpenseRepository,
                 clock: DateTimeProvider,
                 default_currency: CurrencyCode = CurrencyCode.EGP):
        self.payment_repo = payment_repo
        self.expense_repo = expense_repo
        self.clock = clock
        self.default_currency = default_currency

    async def get_daily_cash_flow(
        self,
        business_date: Optional[date] = None,
        currency: Optional[CurrencyCode] = None
    ) -> DailyCashFlow:
        """Cash payments taken during the UTC day minus cash expenses of the business date"""
        business_date = business_date or self.clock.today()
        currency = currency or self.default_currency

        start = datetime.combine(business_date, time.min, tzinfo=timezone.utc)
        payments = await self.payment_repo.find_created_between(
            start, start + timedelta(days=1), currency, PaymentMethod.CASH
        )
        expenses = await self.expense_repo.find_by_business_date_range(business_date, business_date, currency)

        total_payments = round_money(sum((p.amount for p in payments), ZERO))
        total_expenses = round_money(sum(
            (e.amount for e in expenses if e.payment_method == PaymentMethod.CASH), ZERO
        ))
        return DailyCashFlow(
            business_date=business_date,
            currency=currency,
            total_cash_payments=total_payments,
            total_cash_expenses=total_expenses,
            net_cash_in_drawer=total_payments - total_expenses
        )
