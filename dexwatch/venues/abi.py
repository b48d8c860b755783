"""
Router ABI loading.

The ABI is read once at startup and shared by every router client.
"""

import json
from pathlib import Path
from typing import Any, Optional

from dexwatch.core.config import get_settings
from dexwatch.core.errors import ConfigurationError
from dexwatch.core.logging import get_logger

logger = get_logger("abi")

QUOTE_METHOD = "getAmountsOut"


def load_router_abi(abi_path: Optional[str] = None) -> list[dict[str, Any]]:
    """
    Load a router contract ABI from a JSON file.

    Accepts either a bare ABI list or a compiler artifact with an "abi" key.

    Raises:
        ConfigurationError: file missing, not JSON, or no getAmountsOut entry
    """
    abi_path = abi_path or get_settings().dexwatch_abi_path
    path = Path(abi_path)
    if not path.exists():
        raise ConfigurationError(f"ABI file not found: {abi_path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid ABI JSON in {abi_path}: {e}") from e

    abi = data.get("abi") if isinstance(data, dict) else data
    if not isinstance(abi, list):
        raise ConfigurationError(f"ABI in {abi_path} must be a list of entries")

    if not any(
        isinstance(entry, dict)
        and entry.get("type") == "function"
        and entry.get("name") == QUOTE_METHOD
        for entry in abi
    ):
        raise ConfigurationError(f"ABI in {abi_path} has no {QUOTE_METHOD} function")

    logger.info(f"Loaded router ABI from {abi_path} ({len(abi)} entries)")
    return abi
