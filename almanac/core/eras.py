"""
Era Resolution Module.

Maps absolute year numbers onto a calendar's eras and back. Eras are
checked in list order and the first era containing a year wins, which
lets a short-lived era (a king's reign) shadow a long one (the Common
Era) without splitting it.
"""

import logging
from typing import Optional, Sequence

from almanac.core.calendar import Era
from almanac.core.errors import CalendarConfigError

logger = logging.getLogger(__name__)


class EraResolver:
    """
    Resolves years to eras for an ordered list of eras.

    A calendar validates that its eras cover every year, so ``resolve``
    only fails for resolvers built directly over an incomplete list.
    """

    def __init__(self, eras: Sequence[Era]):
        """
        Args:
            eras: The eras to search, in priority order.
        """
        self._eras = tuple(eras)

    @property
    def eras(self) -> Sequence[Era]:
        return self._eras

    def index_of(self, year: int) -> int:
        """
        Finds the index of the first era containing an absolute year.

        Args:
            year: The absolute year number.

        Returns:
            int: Index into the era list.

        Raises:
            CalendarConfigError: If no era contains the year.
        """
        for index, era in enumerate(self._eras):
            if era.contains(year):
                logger.debug(f"Year {year} resolved to era '{era.name}'")
                return index
        raise CalendarConfigError([f"No era contains year {year}"])

    def resolve(self, year: int) -> Era:
        """Gets the first era containing an absolute year."""
        return self._eras[self.index_of(year)]

    def find(self, name: str) -> Era:
        """
        Looks an era up by name.

        Raises:
            CalendarConfigError: If there is no era with that name.
        """
        for era in self._eras:
            if era.name == name:
                return era
        raise CalendarConfigError([f"Unknown era '{name}'"])

    def displayed_year(self, year: int, era: Optional[Era] = None) -> int:
        """
        Renumbers an absolute year relative to an era.

        Eras with a start count from 1 at their first year. Eras without
        a start keep the absolute numbering.

        Args:
            year: The absolute year number.
            era: The era to number against. Resolved from the year when
                omitted.

        Returns:
            int: The era-relative year.
        """
        if era is None:
            era = self.resolve(year)
        if era.start_year is None:
            return year
        return year - era.start_year + 1

    @staticmethod
    def absolute_year(era: Era, displayed_year: int) -> int:
        """Inverse of ``displayed_year`` for a given era."""
        if era.start_year is None:
            return displayed_year
        return displayed_year + era.start_year - 1
