"""Price oracle collaborators consumed by the lifecycle manager.

The engine only reads the latest quote. `None` means no quote exists for the
asset, which is a distinct condition from a quote of zero.
"""

from abc import ABC, abstractmethod
import json
import logging
import threading
from typing import Any, Dict, Optional

from web3 import Web3


logger = logging.getLogger(__name__)


class PriceOracle(ABC):
    """Read-only source of the current unit price of an asset."""

    @abstractmethod
    def get_price(self, asset: str) -> Optional[int]:
        """Return the latest fixed-point price for *asset*, or None if unquoted."""


class StaticPriceOracle(PriceOracle):
    """In-memory quotes, updated explicitly by the caller."""

    def __init__(self, prices: Optional[Dict[str, int]] = None) -> None:
        self._prices: Dict[str, int] = {}
        self._lock = threading.RLock()
        for asset, price in (prices or {}).items():
            self.set_price(asset, price)

    def set_price(self, asset: str, price: int) -> None:
        """Publish a new quote."""
        if price < 0:
            raise ValueError("Price must be >= 0")
        with self._lock:
            self._prices[asset.upper()] = int(price)
        logger.debug("Price updated asset=%s price=%s", asset, price)

    def clear_price(self, asset: str) -> None:
        """Withdraw the quote so the asset reads as unpriced."""
        with self._lock:
            self._prices.pop(asset.upper(), None)

    def get_price(self, asset: str) -> Optional[int]:
        with self._lock:
            return self._prices.get(asset.upper())


class ContractPriceOracle(PriceOracle):
    """Read quotes from an on-chain price feed contract through web3."""

    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        abi_json: str,
        price_function: str = "getPrice",
        pass_asset: bool = False,
        contract: Any = None,
    ) -> None:
        """Create a contract handle.

        Args:
            rpc_url: JSON-RPC endpoint.
            contract_address: Price feed contract address.
            abi_json: Contract ABI as JSON string.
            price_function: Read-only function returning the price.
            pass_asset: Whether the price function takes the asset symbol.
            contract: Pre-built contract handle, bypassing provider setup.
        """
        self._price_function = price_function
        self._pass_asset = pass_asset
        if contract is not None:
            self._contract = contract
            return
        try:
            abi = json.loads(abi_json or "[]")
            w3 = Web3(Web3.HTTPProvider(rpc_url))
            checksum_address = Web3.to_checksum_address(contract_address)
            self._contract = w3.eth.contract(address=checksum_address, abi=abi)
            logger.info("Contract price oracle initialized with contract=%s", checksum_address)
        except Exception:
            logger.exception("Failed to initialize contract price oracle.")
            raise

    def get_price(self, asset: str) -> Optional[int]:
        """Call the price function; a failed call reads as no quote."""
        try:
            function = getattr(self._contract.functions, self._price_function)
            call = function(asset) if self._pass_asset else function()
            raw_price = call.call()
        except Exception:
            logger.warning(
                "Price function unavailable or failed function=%s asset=%s",
                self._price_function,
                asset,
            )
            return None
        if raw_price is None:
            return None
        price = int(raw_price)
        if price < 0:
            logger.warning("Negative price ignored asset=%s price=%s", asset, price)
            return None
        return price
