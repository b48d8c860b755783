"""
Venues module - Liquidity venue adapters

Each venue quotes an output amount for a fixed input along a token path.
All venues inherit from VenueClient for consistent failure handling.
"""

from dexwatch.venues.abi import load_router_abi
from dexwatch.venues.base import VenueClient
from dexwatch.venues.router import (
    RouterVenueClient,
    build_router_clients,
    checksum_path,
)

__all__ = [
    "VenueClient",
    "RouterVenueClient",
    "build_router_clients",
    "checksum_path",
    "load_router_abi",
]
