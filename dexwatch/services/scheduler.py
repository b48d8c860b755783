"""
Scheduler service for the sampling loop.

Uses APScheduler with an interval trigger. Each tick runs one
sample -> evaluate -> record cycle; max_instances=1 keeps cycles from
overlapping, so a slow tick delays the next one instead of stacking.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from apscheduler.schedulers.background import BackgroundScheduler

from dexwatch.arb.evaluator import ArbitrageEvaluator, Evaluation, from_smallest_units
from dexwatch.arb.sampler import PriceSampler
from dexwatch.core.config import BotConfig, Settings
from dexwatch.core.errors import StoreError
from dexwatch.core.logging import LoggerMixin
from dexwatch.core.timeutil import now_utc
from dexwatch.domain.models import Snapshot
from dexwatch.services.persistence import OpportunityStore, create_opportunity_store
from dexwatch.venues.abi import load_router_abi
from dexwatch.venues.base import VenueClient
from dexwatch.venues.router import build_router_clients, checksum_path

TICK_JOB_ID = "arbitrage_tick"


class SchedulerState(str, Enum):
    """Loop state."""
    IDLE = "idle"
    EVALUATING = "evaluating"


@dataclass
class CycleResult:
    """What one tick produced."""
    snapshot: Optional[Snapshot] = None
    evaluation: Optional[Evaluation] = None
    record_id: Optional[int] = None
    error: Optional[str] = None

    @property
    def recorded(self) -> bool:
        return self.record_id is not None


class ArbitrageScheduler(LoggerMixin):
    """
    Drives PriceSampler -> ArbitrageEvaluator -> OpportunityStore on a fixed interval.

    Owns the store and the venue clients and releases them on stop().
    No cycle failure propagates out of run_cycle().
    """

    def __init__(
        self,
        venues: Sequence[VenueClient],
        sampler: PriceSampler,
        evaluator: ArbitrageEvaluator,
        store: OpportunityStore,
        trade_size: int,
        path: Sequence[str],
        interval_seconds: float,
    ):
        self.venues = list(venues)
        self.sampler = sampler
        self.evaluator = evaluator
        self.store = store
        self.trade_size = trade_size
        self.path = list(path)
        self.interval_seconds = interval_seconds

        self.state = SchedulerState.IDLE
        self._scheduler: Optional[BackgroundScheduler] = None

    @property
    def scheduler(self) -> BackgroundScheduler:
        """Lazy-initialize scheduler."""
        if self._scheduler is None:
            self._scheduler = BackgroundScheduler(timezone="UTC")
        return self._scheduler

    def run_cycle(self) -> CycleResult:
        """Run one sample -> evaluate -> record round."""
        self.state = SchedulerState.EVALUATING
        result = CycleResult()
        try:
            self.logger.info("Checking prices...")
            result.snapshot = self.sampler.sample(self.venues, self.trade_size, self.path)
            self._log_snapshot(result.snapshot)

            result.evaluation = self.evaluator.evaluate_detailed(result.snapshot)
            self._log_evaluation(result.evaluation)

            record = result.evaluation.record
            if record is not None:
                try:
                    result.record_id = self.store.record(record)
                    self.logger.info(f"Opportunity saved (#{result.record_id})")
                except StoreError as e:
                    result.error = e.message
                    self.logger.warning(
                        f"Opportunity NOT saved: {record.to_dict()} - {e.message}"
                    )

        except Exception as e:
            result.error = str(e)
            self.logger.error(f"Cycle failed: {e}", exc_info=True)

        finally:
            self.state = SchedulerState.IDLE

        return result

    def _log_snapshot(self, snapshot: Snapshot) -> None:
        decimals = self.evaluator.quote_decimals
        parts = []
        for quote in snapshot:
            if quote.valid:
                parts.append(f"{quote.venue_id}: {from_smallest_units(quote.output_amount, decimals)}")
            else:
                parts.append(f"{quote.venue_id}: invalid ({quote.error})")
        self.logger.info(" | ".join(parts))

    def _log_evaluation(self, evaluation: Evaluation) -> None:
        if evaluation.found:
            self.logger.info(f"Net profit (after costs): {evaluation.profit}")
            self.logger.info(
                f"Arbitrage opportunity: buy on {evaluation.buy_venue} -> "
                f"sell on {evaluation.sell_venue}"
            )
        elif evaluation.buy_venue is not None:
            self.logger.info(
                f"Net profit (after costs): {evaluation.profit} - profit too small, skipping"
            )
        else:
            self.logger.info(f"No arbitrage: {evaluation.reason}")

    def start(self) -> str:
        """
        Schedule the tick job and start the scheduler.

        The first tick runs immediately.

        Returns:
            Job ID
        """
        job = self.scheduler.add_job(
            self.run_cycle,
            "interval",
            seconds=self.interval_seconds,
            id=TICK_JOB_ID,
            name=TICK_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            next_run_time=now_utc(),
        )
        self.logger.info(f"Added interval job: {TICK_JOB_ID} every {self.interval_seconds}s")

        if not self.scheduler.running:
            self.scheduler.start()
            self.logger.info("Scheduler started")
        return job.id

    def stop(self) -> None:
        """Stop the scheduler and release the store and venue clients."""
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=True)
            self.logger.info("Scheduler stopped")

        for venue in self.venues:
            venue.close()
        self.store.close()


def create_arbitrage_scheduler(
    config: BotConfig,
    settings: Optional[Settings] = None,
    abi_path: Optional[str] = None,
    store: Optional[OpportunityStore] = None,
    venues: Optional[Sequence[VenueClient]] = None,
) -> ArbitrageScheduler:
    """
    Wire the loop from a validated config.

    Raises:
        ConfigurationError: bad ABI or addresses
        StoreError: database cannot be opened
    """
    bot = config.settings
    path = checksum_path(config)
    if venues is None:
        venues = build_router_clients(config, load_router_abi(abi_path))

    return ArbitrageScheduler(
        venues=venues,
        sampler=PriceSampler(timeout=bot.quote_timeout),
        evaluator=ArbitrageEvaluator(
            cost_estimate=bot.cost_estimate,
            min_profit=bot.min_profit,
            quote_decimals=bot.quote_decimals,
        ),
        store=store or create_opportunity_store(settings),
        trade_size=bot.trade_size,
        path=path,
        interval_seconds=bot.refresh_rate,
    )
