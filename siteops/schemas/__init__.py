"""
Pydantic schemas shared by the siteops services.

Modules:
- monitor_schema: Check statuses and results produced by the website monitor
- optimizer_schema: Savings records and run statistics of the asset optimizer
"""
from siteops.schemas.monitor_schema import CheckResult, CheckStatus
from siteops.schemas.optimizer_schema import (
    AssetType,
    OptimizationStats,
    SavingsRecord,
)

__all__ = [
    "CheckResult",
    "CheckStatus",
    "AssetType",
    "OptimizationStats",
    "SavingsRecord",
]
