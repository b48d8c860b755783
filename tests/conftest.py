"""Shared fixtures and fakes."""

import time
from typing import Optional, Sequence

import pytest
from web3 import Web3

from dexwatch.domain.models import Snapshot, VenueQuote
from dexwatch.venues.base import VenueClient

WETH = Web3.to_checksum_address("0x7ceb23fd6bc0add59e62ac25578270cff1b9f619")
USDC = Web3.to_checksum_address("0x2791bca1f2de4661ed88a30c99a7a9449aa84174")
PATH = [WETH, USDC]
TRADE_SIZE = 10**18


class FakeVenue(VenueClient):
    """Venue returning a fixed amount, raising, or sleeping first."""

    def __init__(
        self,
        name: str,
        amount: int = 0,
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ):
        self.name = name
        self.amount = amount
        self.error = error
        self.delay = delay
        self.calls = 0
        self.closed = False

    def amount_out(self, trade_size: int, path: Sequence[str]) -> int:
        self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.amount

    def close(self) -> None:
        self.closed = True


def make_snapshot(*quotes) -> Snapshot:
    """Build a snapshot from (venue, amount) pairs; amount None means a failed fetch."""
    items = []
    for venue, amount in quotes:
        if amount is None:
            items.append(VenueQuote.failed(venue, "fetch failed"))
        else:
            items.append(VenueQuote.ok(venue, amount))
    return Snapshot(quotes=tuple(items))


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'arbitrage.db'}"
