"""
Session State Value Objects

- SessionState: the two states of a stock-count round
- SessionTransition: immutable record of one state change
"""

from enum import Enum
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field


class SessionState(Enum):
    """Lifecycle states of a stock-count session"""

    AWAITING_WAREHOUSE = "awaiting_warehouse"
    REGISTERING = "registering"


class SessionTransition(BaseModel):
    """Immutable session state transition record"""
    from_state: SessionState
    to_state: SessionState
    timestamp: datetime = Field(description="Timestamp when transition occurred")
    reason: str = Field(description="Command that caused the transition")
    warehouse_id: Optional[str] = Field(None, description="Warehouse selected after the transition")

    model_config = {"frozen": True}
