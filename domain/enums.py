"""Domain Enums"""
from enum import Enum


class ReservationStatus(str, Enum):
    DRAFT = "DRAFT"
    CONFIRMED = "CONFIRMED"
    CHECKED_IN = "CHECKED_IN"
    CHECKED_OUT = "CHECKED_OUT"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


class ReservationSource(str, Enum):
    MANUAL = "MANUAL"
    PDF = "PDF"
    PHONE = "PHONE"
    OTA = "OTA"
    DIRECT = "DIRECT"


class RoomStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    OCCUPIED = "OCCUPIED"
    CLEANING = "CLEANING"
    MAINTENANCE = "MAINTENANCE"
    OUT_OF_SERVICE = "OUT_OF_SERVICE"


class CurrencyCode(str, Enum):
    EGP = "EGP"
    USD = "USD"
    EUR = "EUR"
    OTHER = "OTHER"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CARD = "CARD"
    BANK_TRANSFER = "BANK_TRANSFER"
    OTHER = "OTHER"


class ExpenseCategory(int, Enum):
    MAINTENANCE = 1
    PURCHASES = 2
    BREAKFAST = 3
    OTHER = 4
    SALARIES = 5
    UTILITIES = 6
    DELIVERY = 7
    COMMISSION = 8
    ELECTRICITY_BILL = 9
    WATER_BILL = 10


class _CaseInsensitiveEnum(str, Enum):
    """Accepts any casing of a member value ("Actual", "ACTUAL", "roomtype")"""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value.lower() == lowered:
                    return member
        return None


class ReportingMode(_CaseInsensitiveEnum):
    ACTUAL = "actual"
    FORECAST = "forecast"


class RevenueGroupBy(_CaseInsensitiveEnum):
    DAY = "day"
    ROOM_TYPE = "roomType"
    ROOM = "room"
    BRANCH = "branch"
    HOTEL = "hotel"


class OccupancyGroupBy(_CaseInsensitiveEnum):
    DAY = "day"
    ROOM_TYPE = "roomType"
    BOTH = "both"


class RoomBoardStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    RESERVED = "RESERVED"
    OCCUPIED = "OCCUPIED"
