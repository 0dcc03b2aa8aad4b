"""
Export Value Objects

- SessionCalendar: date and ISO week frozen when a session is created
- SessionHeader: the per-row session columns of an export
- CsvExport: serialized CSV document plus its file name
"""

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field


class SessionCalendar(BaseModel):
    """Temporal context of a session, computed once"""
    iso_date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$", description="Calendar date YYYY-MM-DD")
    week_number: int = Field(ge=1, le=53, description="ISO-8601 week number of iso_date")

    model_config = {"frozen": True}

    @classmethod
    def from_date(cls, day: date) -> "SessionCalendar":
        """Build the calendar for a given day"""
        return cls(iso_date=day.isoformat(), week_number=day.isocalendar()[1])


class SessionHeader(BaseModel):
    """Session columns shared by every exported row"""
    iso_date: str
    week_number: int
    warehouse_id: str
    warehouse_name: Optional[str] = None

    model_config = {"frozen": True}


class CsvExport(BaseModel):
    """Serialized export ready to be handed to a sink"""
    content: str = Field(description="CSV document, semicolon-delimited")
    filename: str = Field(description="Deterministic export file name")
    item_count: int = Field(ge=0, description="Number of data rows")

    model_config = {"frozen": True}
