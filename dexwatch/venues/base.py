"""
Base class for venue clients.

All venues must:
- Inherit from VenueClient
- Implement amount_out() and let it raise on any failure
- Never leak those failures to callers of quote()/fetch_quote()
"""

from abc import ABC, abstractmethod
from typing import Sequence

from dexwatch.core.logging import LoggerMixin
from dexwatch.domain.models import VenueQuote


def check_quote_args(trade_size: int, path: Sequence[str]) -> None:
    """Reject malformed requests. These are caller bugs, not venue failures."""
    if trade_size <= 0:
        raise ValueError(f"trade_size must be positive, got {trade_size}")
    if len(path) < 2:
        raise ValueError(f"path needs at least 2 tokens, got {len(path)}")


class VenueClient(ABC, LoggerMixin):
    """
    Abstract liquidity venue.

    Subclasses implement amount_out(). The base class turns every failure
    into an invalid VenueQuote (fetch_quote) or the zero sentinel (quote).
    """

    name: str = "venue"

    @abstractmethod
    def amount_out(self, trade_size: int, path: Sequence[str]) -> int:
        """
        Query the venue for the output amount of trade_size along path.

        Raises:
            Any exception on transport, protocol or venue-side failure.
        """
        pass

    def fetch_quote(self, trade_size: int, path: Sequence[str]) -> VenueQuote:
        """Quote as an explicit result: valid amount or failure reason."""
        check_quote_args(trade_size, path)
        try:
            amount = self.amount_out(trade_size, path)
        except Exception as e:
            self.logger.warning(f"Error fetching price from {self.name}: {e}")
            return VenueQuote.failed(self.name, str(e) or e.__class__.__name__)

        quote = VenueQuote.ok(self.name, int(amount))
        if not quote.valid:
            self.logger.warning(f"{self.name} returned a degenerate quote: {amount}")
        return quote

    def quote(self, trade_size: int, path: Sequence[str]) -> int:
        """Output amount in smallest units, or 0 when no valid quote is available."""
        return self.fetch_quote(trade_size, path).output_amount

    def close(self) -> None:
        """Release any held resources. Default: nothing to release."""
        pass
