"""Occupancy reporting - night-by-night room counts"""
import logging
from datetime import date, timedelta
from typing import Dict, List, Optional, Set
from uuid import UUID

from application.dtos import OccupancyDay, OccupancyByRoomTypeDay, OccupancySummary
from application.interfaces import DateTimeProvider
from application.report_context import (
    SupplyCalculator, ReservationWindowFilter, ReportLookups, each_day
)
from domain.entities import Reservation
from domain.enums import ReportingMode, OccupancyGroupBy
from domain.repositories import ReservationRepository, RoomRepository, RoomTypeRepository

logger = logging.getLogger(__name__)


def _rate(part: int, whole: int) -> float:
    return round(part / whole, 2) if whole > 0 else 0.0


class OccupancyService:
    """Counts occupied rooms per night for an inclusive date range.

    A reservation occupies its rooms on night ``d`` when
    ``check_in <= d < check_out``; the check-out date is a free night.
    Rooms are counted once per night however many reservations reference
    them, so two stays on the same room never count twice, while stays on
    more rooms than the hotel sells show up as ``overbooked``.
    """

    def __init__(
        self,
        reservation_repo: ReservationRepository,
        room_repo: RoomRepository,
        room_type_repo: RoomTypeRepository,
        clock: DateTimeProvider,
        default_days: int = 7
    ):
        self.window = ReservationWindowFilter(reservation_repo)
        self.supply = SupplyCalculator(room_repo)
        self.room_repo = room_repo
        self.room_type_repo = room_type_repo
        self.clock = clock
        self.default_days = default_days

    def resolve_range(self, date_from: Optional[date], date_to: Optional[date]):
        """Default to a week from hotel today; never less than one day"""
        start = date_from or self.clock.today()
        end = date_to or start + timedelta(days=self.default_days)
        if end <= start:
            end = start + timedelta(days=1)
        return start, end

    async def get_occupancy(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        mode: ReportingMode = ReportingMode.FORECAST,
        group_by: OccupancyGroupBy = OccupancyGroupBy.BOTH
    ) -> OccupancySummary:
        start, end = self.resolve_range(date_from, date_to)
        nights_count = (end - start).days + 1

        total_rooms = await self.supply.total_rooms()
        supply_room_nights = SupplyCalculator.supply_room_nights(total_rooms, nights_count)
        reservations = await self.window.for_occupancy(start, end, mode)

        with_room_types = group_by in (OccupancyGroupBy.ROOM_TYPE, OccupancyGroupBy.BOTH)
        lookups = None
        if with_room_types:
            lookups = await ReportLookups.load(self.room_repo, self.room_type_repo)

        by_day: List[OccupancyDay] = []
        by_room_type: List[OccupancyByRoomTypeDay] = []
        sold_room_nights = 0

        for night in each_day(start, end):
            active = [r for r in reservations if r.date_range.is_active_on(night)]
            occupied = len({line.room_id for r in active for line in r.lines})
            sold_room_nights += occupied

            by_day.append(OccupancyDay(
                date=night,
                total_rooms=total_rooms,
                occupied_rooms=occupied,
                occupancy_rate=_rate(occupied, total_rooms),
                room_nights_sold=occupied,
                available_rooms=total_rooms - occupied,
                overbooked=occupied > total_rooms
            ))

            if with_room_types:
                by_room_type.extend(self._room_types_on(night, active, lookups))

        logger.info(
            "Occupancy %s..%s mode=%s: rooms=%d sold=%d supply=%d reservations=%d",
            start, end, mode.value, total_rooms, sold_room_nights, supply_room_nights, len(reservations)
        )

        return OccupancySummary(
            from_date=start,
            to_date=end,
            nights_count=nights_count,
            mode=mode,
            total_rooms=total_rooms,
            supply_room_nights=supply_room_nights,
            sold_room_nights=sold_room_nights,
            occupancy_rate_overall=_rate(sold_room_nights, supply_room_nights),
            by_day=by_day,
            by_room_type_by_day=by_room_type if with_room_types else []
        )

    @staticmethod
    def _room_types_on(night: date, active: List[Reservation], lookups: ReportLookups) -> List[OccupancyByRoomTypeDay]:
        rooms_by_type: Dict[UUID, Set[UUID]] = {}
        for reservation in active:
            for line in reservation.lines:
                rooms_by_type.setdefault(line.room_type_id, set()).add(line.room_id)

        rows = [
            OccupancyByRoomTypeDay(
                date=night,
                room_type_id=room_type_id,
                room_type_name=lookups.room_type_name(room_type_id),
                occupied_rooms_of_type=len(rooms),
                room_nights_sold_of_type=len(rooms)
            )
            for room_type_id, rooms in rooms_by_type.items()
        ]
        rows.sort(key=lambda row: (row.room_type_name or "", str(row.room_type_id)))
        return rows
