from __future__ import annotations
from datetime import date as date_type
from typing import Optional, Dict, Union
from pydantic import BaseModel, ConfigDict, Field

# --- Invocation Models ---

class ExportOptions(BaseModel):
    """Validated command-line input for a single export run."""
    model_config = ConfigDict(frozen=True)

    username: str
    date: Optional[date_type] = None
    pretty: bool = False

# --- Request Models ---

class DateRange(BaseModel):
    """One-day [start, end) window as YYYY-MM-DD strings."""
    model_config = ConfigDict(frozen=True)

    start_date: str
    end_date: str

class ChartRequest(BaseModel):
    """Fully assembled URL and query parameters for one chart GET."""
    model_config = ConfigDict(frozen=True)

    url: str
    # query values as sent on the wire
    params: Dict[str, Union[str, int]] = Field(default_factory=dict)
