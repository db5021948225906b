"""
Data layer: observation model, provider protocol, CSV provider, holiday calendar
"""

from .models import DataProvider, MarketObservation
from .calendars import HolidayCalendar, holidays_for_year, easter_sunday
from .providers_csv import CsvDataProvider
from .providers_memory import InMemoryDataProvider

__all__ = [
    "DataProvider",
    "MarketObservation",
    "HolidayCalendar",
    "holidays_for_year",
    "easter_sunday",
    "CsvDataProvider",
    "InMemoryDataProvider",
]
