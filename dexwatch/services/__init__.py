"""
Services module - Cross-cutting capabilities

Contains:
- Opportunity persistence
- Scheduling of the sampling loop
"""

from dexwatch.services.persistence import OpportunityStore, create_opportunity_store
from dexwatch.services.scheduler import (
    ArbitrageScheduler,
    CycleResult,
    SchedulerState,
    create_arbitrage_scheduler,
)

__all__ = [
    "OpportunityStore",
    "create_opportunity_store",
    "ArbitrageScheduler",
    "CycleResult",
    "SchedulerState",
    "create_arbitrage_scheduler",
]
