"""Shared reporting building blocks: supply, reservation window, name lookups"""
from datetime import date, timedelta
from typing import Dict, List, Optional
from uuid import UUID

from domain.entities import Reservation
from domain.enums import ReportingMode, CurrencyCode
from domain.policies import occupancy_statuses, REVENUE_STATUSES, RECEPTION_STATUSES
from domain.repositories import (
    ReservationRepository, RoomRepository, RoomTypeRepository, BranchRepository
)

UNKNOWN_ROOM_TYPE = "Unknown Type"
UNASSIGNED_ROOM = "Unassigned"
UNKNOWN_BRANCH = "Unknown Branch"
UNKNOWN_HOTEL = "Unknown Hotel"


class SupplyCalculator:
    """Sellable inventory: active rooms that are not out of service"""

    def __init__(self, room_repo: RoomRepository):
        self.room_repo = room_repo

    async def total_rooms(self) -> int:
        return await self.room_repo.count_active(exclude_out_of_service=True)

    @staticmethod
    def supply_room_nights(total_rooms: int, nights_count: int) -> int:
        return total_rooms * nights_count


class ReservationWindowFilter:
    """Selects the reservations a report has to look at"""

    def __init__(self, reservation_repo: ReservationRepository):
        self.reservation_repo = reservation_repo

    async def for_occupancy(self, start: date, end: date, mode: ReportingMode) -> List[Reservation]:
        """Stays touching any night in [start, end] (end inclusive)"""
        return await self.reservation_repo.find_overlapping(
            start, end + timedelta(days=1), occupancy_statuses(mode)
        )

    async def for_revenue(self, start: date, last_night: date, currency: Optional[CurrencyCode]) -> List[Reservation]:
        """Revenue-bearing stays touching any night in [start, last_night]"""
        return await self.reservation_repo.find_overlapping(
            start, last_night + timedelta(days=1), REVENUE_STATUSES, currency
        )

    async def for_reception(self, day: date) -> List[Reservation]:
        """Expected and in-house stays with check_in <= day <= check_out"""
        return await self.reservation_repo.find_overlapping(
            day - timedelta(days=1), day + timedelta(days=1), RECEPTION_STATUSES
        )

    async def for_night(self, day: date) -> List[Reservation]:
        """Expected and in-house stays holding a room on night ``day``"""
        return await self.reservation_repo.find_overlapping(
            day, day + timedelta(days=1), RECEPTION_STATUSES
        )


class ReportLookups:
    """Display names for the ids a reservation line carries"""

    def __init__(
        self,
        room_numbers: Dict[UUID, str],
        room_type_names: Dict[UUID, str],
        branch_names: Dict[UUID, str]
    ):
        self.room_numbers = room_numbers
        self.room_type_names = room_type_names
        self.branch_names = branch_names

    @classmethod
    async def load(
        cls,
        room_repo: RoomRepository,
        room_type_repo: RoomTypeRepository,
        branch_repo: Optional[BranchRepository] = None
    ) -> "ReportLookups":
        rooms = await room_repo.find_all()
        room_types = await room_type_repo.find_all()
        branches = await branch_repo.find_all() if branch_repo else []
        return cls(
            room_numbers={r.room_id: r.room_number for r in rooms},
            room_type_names={rt.room_type_id: rt.name for rt in room_types},
            branch_names={b.branch_id: b.name for b in branches},
        )

    def room_number(self, room_id: UUID) -> str:
        return self.room_numbers.get(room_id, UNASSIGNED_ROOM)

    def room_type_name(self, room_type_id: UUID) -> str:
        return self.room_type_names.get(room_type_id, UNKNOWN_ROOM_TYPE)

    def branch_name(self, branch_id: Optional[UUID]) -> str:
        if branch_id is None:
            return UNKNOWN_BRANCH
        return self.branch_names.get(branch_id, UNKNOWN_BRANCH)


def each_day(start: date, end: date):
    """Every calendar day from start to end, both included"""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)
