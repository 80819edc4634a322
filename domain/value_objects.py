"""Domain Value Objects"""
from pydantic import BaseModel, validator
from datetime import date
from decimal import Decimal
from uuid import UUID
from typing import Optional


class DateRange(BaseModel):
    """Value Object for a stay: check-in night included, check-out night excluded"""
    check_in: date
    check_out: date

    @validator('check_out')
    def check_out_after_check_in(cls, v, values):
        if 'check_in' in values and v <= values['check_in']:
            raise ValueError('Check-out must be after check-in')
        return v

    def nights(self) -> int:
        """Calculate number of nights"""
        return (self.check_out - self.check_in).days

    def overlaps(self, start: date, end: date) -> bool:
        """True when the stay shares at least one night with [start, end)"""
        return self.check_in < end and self.check_out > start

    def is_active_on(self, night: date) -> bool:
        """The guest sleeps here on `night`; the check-out date itself is free"""
        return self.check_in <= night < self.check_out

    class Config:
        frozen = True


class NightlyAmount(BaseModel):
    """One night's share of a reservation total"""
    night: date
    amount: Decimal

    class Config:
        frozen = True


class BucketKey(BaseModel):
    """Revenue bucket identity: display label plus the entity it refers to.

    Two buckets with the same label but different ``ref_id`` stay apart, so
    renaming a room type never merges or splits its revenue.
    """
    label: str
    ref_id: Optional[UUID] = None

    class Config:
        frozen = True
