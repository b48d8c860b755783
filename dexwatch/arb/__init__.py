"""
dexwatch Arbitrage Module.

Cross-venue price discrepancy detection.

Components:
- sampler: Concurrent per-tick quote collection
- evaluator: Min/max comparison, cost model, qualification
"""

from dexwatch.arb.evaluator import ArbitrageEvaluator, Evaluation, evaluate
from dexwatch.arb.sampler import PriceSampler

__all__ = [
    "ArbitrageEvaluator",
    "Evaluation",
    "PriceSampler",
    "evaluate",
]
