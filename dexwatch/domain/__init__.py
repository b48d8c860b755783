"""
Domain module - Data models

Contains venue quotes, per-tick snapshots and opportunity records.
"""

from dexwatch.domain.models import OpportunityRecord, Snapshot, VenueQuote

__all__ = [
    "OpportunityRecord",
    "Snapshot",
    "VenueQuote",
]
