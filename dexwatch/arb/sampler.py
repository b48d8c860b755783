"""
Price Sampler.

Queries every venue for the same trade in parallel and assembles a
Snapshot. The round is bounded by a deadline: venues that have not
answered by then count as invalid quotes instead of stalling the tick.
"""

from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Optional, Sequence

from dexwatch.core.logging import LoggerMixin
from dexwatch.core.timeutil import now_utc
from dexwatch.domain.models import Snapshot, VenueQuote
from dexwatch.venues.base import VenueClient, check_quote_args

TIMEOUT_REASON = "timeout"


class PriceSampler(LoggerMixin):
    """Concurrent quote collection with a per-round timeout."""

    def __init__(self, timeout: Optional[float] = None):
        """
        Args:
            timeout: Seconds to wait for all venues. None waits indefinitely.
        """
        self.timeout = timeout

    def sample(
        self,
        venues: Sequence[VenueClient],
        trade_size: int,
        path: Sequence[str],
    ) -> Snapshot:
        """
        Quote trade_size along path on every venue.

        Returns:
            Snapshot with exactly one quote per venue, in venue order
        """
        check_quote_args(trade_size, path)
        if not venues:
            return Snapshot(quotes=())

        taken_at = now_utc()
        executor = ThreadPoolExecutor(
            max_workers=len(venues),
            thread_name_prefix="dexwatch-quote",
        )
        try:
            futures = [
                executor.submit(venue.fetch_quote, trade_size, path)
                for venue in venues
            ]
            _, pending = wait(futures, timeout=self.timeout)
            quotes = tuple(
                self._collect(venue, future, future in pending)
                for venue, future in zip(venues, futures)
            )
        finally:
            # Stalled calls are abandoned, not joined.
            executor.shutdown(wait=False, cancel_futures=True)

        return Snapshot(quotes=quotes, taken_at=taken_at)

    def _collect(
        self,
        venue: VenueClient,
        future: Future,
        timed_out: bool,
    ) -> VenueQuote:
        if timed_out:
            self.logger.warning(
                f"{venue.name} did not answer within {self.timeout}s, marking invalid"
            )
            return VenueQuote.failed(venue.name, TIMEOUT_REASON)

        try:
            return future.result()
        except Exception as e:
            self.logger.error(f"Unexpected error quoting {venue.name}: {e}", exc_info=True)
            return VenueQuote.failed(venue.name, str(e) or e.__class__.__name__)
