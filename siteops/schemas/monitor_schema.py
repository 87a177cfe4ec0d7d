"""
Website Monitor Schemas.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class CheckStatus(str, Enum):
    """Outcome tier of a single check."""
    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"
    ERROR = "error"
    SKIPPED = "skipped"


class CheckResult(BaseModel):
    """Result of one monitor check."""
    check: str = Field(..., description="Check name (availability, performance, ...)")
    status: CheckStatus = Field(..., description="Classification tier")
    message: str = Field(..., description="Human readable summary, as logged")
    value: Optional[float] = Field(
        None,
        description="Measured value (latency, days, percent) when available"
    )
    unit: Optional[str] = Field(None, description="Unit of the measured value")
    alerted: bool = Field(False, description="Whether an alert was dispatched")
    checked_at: datetime = Field(default_factory=datetime.now)

    @property
    def healthy(self) -> bool:
        return self.status == CheckStatus.OK
