"""Application Interfaces - collaborators the services depend on"""
from abc import ABC, abstractmethod
from datetime import date, datetime


class DateTimeProvider(ABC):
    """Hotel-local notion of "now"; business dates never come from the server clock"""

    @abstractmethod
    def now(self) -> datetime:
        """Current time in the hotel's time zone"""
        pass

    @abstractmethod
    def today(self) -> date:
        """Current business date in the hotel's time zone"""
        pass

    @abstractmethod
    def is_late_check_out(self, check_out_date: date) -> bool:
        """Whether the check-out hour has passed for a stay ending on ``check_out_date``"""
        pass
