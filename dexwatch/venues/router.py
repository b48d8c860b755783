"""
Uniswap-V2-style router venue.

Quotes come from the router's getAmountsOut(amountIn, path) view call.
"""

from typing import Any, Optional, Sequence

from tenacity import (
    Retrying,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from web3 import Web3
from web3.exceptions import ContractLogicError

from dexwatch.core.config import BotConfig
from dexwatch.core.errors import ConfigurationError, VenueError
from dexwatch.core.logging import get_logger
from dexwatch.venues.abi import QUOTE_METHOD
from dexwatch.venues.base import VenueClient

logger = get_logger("venues.router")


def to_checksum(address: str, what: str) -> str:
    """Checksum an address or raise ConfigurationError."""
    if not isinstance(address, str) or not Web3.is_address(address):
        raise ConfigurationError(f"Invalid {what} address: {address!r}")
    return Web3.to_checksum_address(address)


def create_web3(rpc_url: str, timeout: float) -> Web3:
    """HTTP provider whose requests give up after `timeout` seconds."""
    return Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))


class RouterVenueClient(VenueClient):
    """
    Venue backed by a V2 router contract.

    Transient RPC failures are retried up to `max_retries` times after the
    first attempt; reverts are not, since the same call will revert again
    within the tick.
    """

    def __init__(
        self,
        name: str,
        router_address: str,
        abi: list[dict[str, Any]],
        web3: Web3,
        max_retries: int = 2,
    ):
        self.name = name
        self.router_address = to_checksum(router_address, f"{name} router")
        self.web3 = web3
        self.contract = web3.eth.contract(address=self.router_address, abi=abi)
        self._retrying = Retrying(
            retry=retry_if_not_exception_type((ContractLogicError, VenueError)),
            stop=stop_after_attempt(max_retries + 1),
            wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
            reraise=True,
        )

    def amount_out(self, trade_size: int, path: Sequence[str]) -> int:
        return self._retrying(self._call_amounts_out, trade_size, list(path))

    def _call_amounts_out(self, trade_size: int, path: list[str]) -> int:
        fn = getattr(self.contract.functions, QUOTE_METHOD)
        amounts = fn(trade_size, path).call()
        if not amounts or len(amounts) != len(path):
            raise VenueError(
                f"Unexpected {QUOTE_METHOD} response: {amounts!r}",
                venue=self.name,
            )
        return int(amounts[-1])

    def __repr__(self) -> str:
        return f"RouterVenueClient(name={self.name!r}, router={self.router_address})"


def build_router_clients(
    config: BotConfig,
    abi: list[dict[str, Any]],
    web3: Optional[Web3] = None,
) -> list[RouterVenueClient]:
    """
    Create one client per configured venue, in configuration order.

    All clients share a single Web3 provider.
    """
    settings = config.settings
    web3 = web3 or create_web3(config.rpc_url, timeout=settings.quote_timeout)

    clients = [
        RouterVenueClient(
            name=name,
            router_address=address,
            abi=abi,
            web3=web3,
            max_retries=settings.quote_retries,
        )
        for name, address in config.venues.items()
    ]
    logger.info(f"Venue clients ready: {', '.join(c.name for c in clients)}")
    return clients


def checksum_path(config: BotConfig) -> list[str]:
    """The configured token path as checksummed addresses."""
    return [
        to_checksum(token, f"token #{i}")
        for i, token in enumerate(config.tokens.path)
    ]
