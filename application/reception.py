"""Front desk views - today's arrivals, departures and the room board"""
import logging
from datetime import date
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from application.dtos import (
    ReceptionToday, ReceptionTodaySummary, ReceptionReservationItem,
    ReceptionRoomsStatus, RoomBoardItem, RoomBoardReservation
)
from application.interfaces import DateTimeProvider
from application.report_context import ReservationWindowFilter, ReportLookups
from domain.entities import Reservation
from domain.enums import ReservationStatus, RoomBoardStatus
from domain.repositories import ReservationRepository, RoomRepository, RoomTypeRepository

logger = logging.getLogger(__name__)


def natural_room_key(room_number: str) -> Tuple[int, int, str]:
    """Numeric room numbers by value first, the rest case-insensitively"""
    if room_number.isdigit():
        return (0, int(room_number), "")
    return (1, 0, room_number.lower())


def _worklist_order(item: ReceptionReservationItem):
    return (item.check_in_date, item.booking_number, str(item.reservation_id))


class ReceptionService:
    """Read-only views the reception desk works from for one business date"""

    def __init__(
        self,
        reservation_repo: ReservationRepository,
        room_repo: RoomRepository,
        room_type_repo: RoomTypeRepository,
        clock: DateTimeProvider
    ):
        self.window = ReservationWindowFilter(reservation_repo)
        self.room_repo = room_repo
        self.room_type_repo = room_type_repo
        self.clock = clock

    async def get_today(self, business_date: Optional[date] = None) -> ReceptionToday:
        """Arrivals, departures and in-house guests.

        Departing guests are still in house until they check out, so they
        appear in both ``departures`` and ``in_house``.
        """
        day = business_date or self.clock.today()
        reservations = await self.window.for_reception(day)
        lookups = await ReportLookups.load(self.room_repo, self.room_type_repo)

        arrivals: List[ReceptionReservationItem] = []
        departures: List[ReceptionReservationItem] = []
        in_house: List[ReceptionReservationItem] = []
        for reservation in reservations:
            item = self._to_item(reservation, lookups)
            if reservation.status == ReservationStatus.CONFIRMED:
                arrivals.append(item)
                continue
            in_house.append(item)
            if reservation.date_range.check_out == day:
                departures.append(item)

        for worklist in (arrivals, departures, in_house):
            worklist.sort(key=_worklist_order)

        logger.info(
            "Reception %s: arrivals=%d departures=%d in_house=%d",
            day, len(arrivals), len(departures), len(in_house)
        )
        return ReceptionToday(
            date=day,
            summary=ReceptionTodaySummary(
                arrivals_count=len(arrivals),
                departures_count=len(departures),
                in_house_count=len(in_house)
            ),
            arrivals=arrivals,
            departures=departures,
            in_house=in_house
        )

    async def get_rooms_status(self, business_date: Optional[date] = None) -> ReceptionRoomsStatus:
        """One row per active room showing who holds it on the night of ``business_date``"""
        day = business_date or self.clock.today()
        reservations = await self.window.for_night(day)
        lookups = await ReportLookups.load(self.room_repo, self.room_type_repo)

        holders: Dict[UUID, List[Reservation]] = {}
        for reservation in reservations:
            for room_id in set(reservation.room_ids()):
                holders.setdefault(room_id, []).append(reservation)

        rooms = [room for room in await self.room_repo.find_all() if room.is_active]
        rooms.sort(key=lambda room: natural_room_key(room.room_number))

        items = []
        for room in rooms:
            item = RoomBoardItem(
                room_id=room.room_id,
                room_number=room.room_number,
                room_type_name=lookups.room_type_name(room.room_type_id),
                room_status=room.status
            )
            if room.room_id in holders:
                holder = min(
                    holders[room.room_id],
                    key=lambda r: (
                        r.status != ReservationStatus.CHECKED_IN,
                        r.date_range.check_in,
                        str(r.reservation_id)
                    )
                )
                item.status = (
                    RoomBoardStatus.OCCUPIED if holder.status == ReservationStatus.CHECKED_IN
                    else RoomBoardStatus.RESERVED
                )
                item.reservation = RoomBoardReservation(
                    reservation_id=holder.reservation_id,
                    guest_name=holder.guest_name,
                    booking_number=holder.booking_number,
                    check_in_date=holder.date_range.check_in,
                    check_out_date=holder.date_range.check_out,
                    hotel_name=holder.hotel_name
                )
            items.append(item)

        logger.debug("Room board %s: rooms=%d held=%d", day, len(items), len(holders))
        return ReceptionRoomsStatus(date=day, items=items)

    def _to_item(self, reservation: Reservation, lookups: ReportLookups) -> ReceptionReservationItem:
        room_numbers = {
            lookups.room_numbers[line.room_id]
            for line in reservation.lines if line.room_id in lookups.room_numbers
        }
        room_type_names = {
            lookups.room_type_names[line.room_type_id]
            for line in reservation.lines if line.room_type_id in lookups.room_type_names
        }
        return ReceptionReservationItem(
            reservation_id=reservation.reservation_id,
            booking_number=reservation.booking_number or str(reservation.reservation_id),
            guest_name=reservation.guest_name,
            phone=reservation.phone,
            check_in_date=reservation.date_range.check_in,
            check_out_date=reservation.date_range.check_out,
            status=reservation.status,
            room_numbers=sorted(room_numbers, key=natural_room_key),
            room_type_names=sorted(room_type_names),
            total_amount=reservation.total_amount,
            balance_due=reservation.balance_due,
            currency=reservation.currency_code,
            payment_method=reservation.payment_method,
            is_late_check_out=(
                reservation.status == ReservationStatus.CHECKED_IN
                and self.clock.is_late_check_out(reservation.date_range.check_out)
            )
        )
