"""
Arbitrage Evaluator.

Decides whether one tick's quotes contain a recordable opportunity.

Core Logic:
1. Keep valid, non-zero quotes; need at least two
2. Buy on the lowest-quoting venue, sell on the highest (first wins ties)
3. raw_diff = max - min, in smallest units of the quote token
4. net = raw_diff - cost, floored at zero
5. Scale to quote-token units; qualify if strictly above min_profit
"""

from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal
from typing import Optional, Union

from dexwatch.core.logging import LoggerMixin
from dexwatch.core.timeutil import now_utc
from dexwatch.domain.models import OpportunityRecord, Snapshot

Number = Union[Decimal, int, float, str]

DEFAULT_QUOTE_DECIMALS = 6

SKIP_INSUFFICIENT = "insufficient quotes"
SKIP_EQUAL = "prices equal"
SKIP_BELOW_THRESHOLD = "below threshold"


def to_decimal(value: Number) -> Decimal:
    """Decimal from config values without float representation noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_smallest_units(amount: Number, decimals: int) -> int:
    """Quote-token amount -> smallest units, truncated."""
    scaled = to_decimal(amount) * (Decimal(10) ** decimals)
    return int(scaled.to_integral_value(rounding=ROUND_DOWN))


def from_smallest_units(units: int, decimals: int) -> Decimal:
    """Smallest units -> quote-token amount."""
    return Decimal(units) / (Decimal(10) ** decimals)


@dataclass(frozen=True)
class Evaluation:
    """Outcome of one evaluation, including why nothing was recorded."""
    record: Optional[OpportunityRecord] = None
    buy_venue: Optional[str] = None
    sell_venue: Optional[str] = None
    raw_diff: int = 0
    profit: Decimal = Decimal(0)
    reason: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.record is not None


class ArbitrageEvaluator(LoggerMixin):
    """
    Min/max price comparison across N venues with a fixed cost model.

    With two venues this is the plain "which one quotes more" comparison;
    equal quotes never produce an opportunity.
    """

    def __init__(
        self,
        cost_estimate: Number,
        min_profit: Number,
        quote_decimals: int = DEFAULT_QUOTE_DECIMALS,
    ):
        """
        Args:
            cost_estimate: Fixed cost per opportunity, quote-token units
            min_profit: Net profit must be strictly above this, quote-token units
            quote_decimals: Decimal precision of the quote token
        """
        if quote_decimals < 0:
            raise ValueError(f"quote_decimals must be >= 0, got {quote_decimals}")
        self.cost_estimate = to_decimal(cost_estimate)
        self.min_profit = to_decimal(min_profit)
        if self.cost_estimate < 0 or self.min_profit < 0:
            raise ValueError("cost_estimate and min_profit must be non-negative")
        self.quote_decimals = quote_decimals
        self.cost_units = to_smallest_units(self.cost_estimate, quote_decimals)

    def evaluate(self, snapshot: Snapshot) -> Optional[OpportunityRecord]:
        """Return an OpportunityRecord if the snapshot qualifies, else None."""
        return self.evaluate_detailed(snapshot).record

    def evaluate_detailed(self, snapshot: Snapshot) -> Evaluation:
        """Evaluate and keep the intermediate numbers for reporting."""
        valid = snapshot.valid_quotes()
        if len(valid) < 2:
            return Evaluation(reason=SKIP_INSUFFICIENT)

        # min()/max() return the first of equal elements: config order breaks ties.
        buy = min(valid, key=lambda q: q.output_amount)
        sell = max(valid, key=lambda q: q.output_amount)
        if buy.output_amount == sell.output_amount:
            return Evaluation(reason=SKIP_EQUAL)

        raw_diff = sell.output_amount - buy.output_amount
        net_units = raw_diff - self.cost_units if raw_diff > self.cost_units else 0
        profit = from_smallest_units(net_units, self.quote_decimals)

        if profit > self.min_profit:
            record = OpportunityRecord(
                buy_venue=buy.venue_id,
                sell_venue=sell.venue_id,
                profit=profit,
                observed_at=now_utc(),
            )
            return Evaluation(
                record=record,
                buy_venue=buy.venue_id,
                sell_venue=sell.venue_id,
                raw_diff=raw_diff,
                profit=profit,
            )

        return Evaluation(
            buy_venue=buy.venue_id,
            sell_venue=sell.venue_id,
            raw_diff=raw_diff,
            profit=profit,
            reason=SKIP_BELOW_THRESHOLD,
        )


def evaluate(
    snapshot: Snapshot,
    cost_estimate: Number,
    min_profit: Number,
    quote_decimals: int = DEFAULT_QUOTE_DECIMALS,
) -> Optional[OpportunityRecord]:
    """Functional form of ArbitrageEvaluator.evaluate."""
    return ArbitrageEvaluator(cost_estimate, min_profit, quote_decimals).evaluate(snapshot)
