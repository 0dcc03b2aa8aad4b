from .count_item import CountItem
from .export import CsvExport, SessionCalendar, SessionHeader
from .session_state import SessionState, SessionTransition
from .warehouse import Warehouse

__all__ = [
    "CountItem",
    "CsvExport",
    "SessionCalendar",
    "SessionHeader",
    "SessionState",
    "SessionTransition",
    "Warehouse",
]
