"""
Core data models for dexwatch.

All models use dataclass and provide to_dict() for JSON serialization.
Amounts from venues are integers in the smallest token unit; profits are
Decimal amounts of the quote token.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from dexwatch.core.timeutil import format_timestamp, now_utc


@dataclass(frozen=True)
class VenueQuote:
    """
    Output amount a single venue quoted for the configured trade.

    valid is False when the call failed, timed out or returned zero;
    error then holds the reason.
    """
    venue_id: str
    output_amount: int = 0
    valid: bool = False
    error: Optional[str] = None

    @classmethod
    def ok(cls, venue_id: str, output_amount: int) -> "VenueQuote":
        if output_amount <= 0:
            return cls.failed(venue_id, "zero amount")
        return cls(venue_id=venue_id, output_amount=output_amount, valid=True)

    @classmethod
    def failed(cls, venue_id: str, reason: str) -> "VenueQuote":
        return cls(venue_id=venue_id, output_amount=0, valid=False, error=reason)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Snapshot:
    """One tick's quotes, one per configured venue, in configuration order."""
    quotes: tuple[VenueQuote, ...]
    taken_at: datetime = field(default_factory=now_utc)

    def __iter__(self):
        return iter(self.quotes)

    def __len__(self) -> int:
        return len(self.quotes)

    def valid_quotes(self) -> list[VenueQuote]:
        """Quotes usable for comparison. Zero amounts count as invalid."""
        return [q for q in self.quotes if q.valid and q.output_amount > 0]

    def to_dict(self) -> dict[str, Any]:
        return {
            "quotes": [q.to_dict() for q in self.quotes],
            "taken_at": format_timestamp(self.taken_at),
        }


@dataclass(frozen=True)
class OpportunityRecord:
    """
    A detected, profit-qualifying discrepancy.

    Immutable. The store assigns the row id and returns it from record();
    the id field is only filled when a record is read back.
    """
    buy_venue: str
    sell_venue: str
    profit: Decimal
    observed_at: datetime = field(default_factory=now_utc)
    id: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "buy_venue": self.buy_venue,
            "sell_venue": self.sell_venue,
            "profit": str(self.profit),
            "observed_at": format_timestamp(self.observed_at),
        }
