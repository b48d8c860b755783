"""dexwatch - cross-venue DEX price discrepancy monitor."""

__version__ = "0.1.0"
