"""
Asset Optimizer Schemas.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict

from pydantic import BaseModel, Field, computed_field


class AssetType(str, Enum):
    """Kind of optimization that produced a saving."""
    JPEG = "jpeg"
    PNG = "png"
    CSS = "css"
    JS = "js"
    GZIP = "gzip"


class SavingsRecord(BaseModel):
    """One line of the savings ledger."""
    timestamp: datetime = Field(default_factory=datetime.now)
    path: str = Field(..., description="File that was optimized")
    asset_type: AssetType
    original_size: int = Field(..., ge=0)
    optimized_size: int = Field(..., ge=0)

    @computed_field
    @property
    def bytes_saved(self) -> int:
        return self.original_size - self.optimized_size

    @computed_field
    @property
    def percent_saved(self) -> int:
        """Integer percent saved, truncated like the log message."""
        if self.original_size == 0:
            return 0
        return self.bytes_saved * 100 // self.original_size


class OptimizationStats(BaseModel):
    """Counters for one optimizer run."""
    processed: int = 0
    optimized: int = 0
    skipped: int = 0
    failed: int = 0
    bytes_saved: Dict[str, int] = Field(default_factory=dict)

    def add_savings(self, asset_type: AssetType, amount: int) -> None:
        key = asset_type.value
        self.bytes_saved[key] = self.bytes_saved.get(key, 0) + amount

    @property
    def total_saved(self) -> int:
        return sum(self.bytes_saved.values())
