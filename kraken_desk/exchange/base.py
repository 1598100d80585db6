"""
Kraken Desk — Base Exchange Client Interface
Operations an Orchestrator relies on, independent of the venue implementation.
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from kraken_desk.data.models import PricePoint


class BaseExchangeClient(ABC):
    """Abstract base class for exchange clients."""

    def __init__(self, venue: str):
        self.venue = venue
        self._session = None

    @abstractmethod
    async def connect(self) -> None:
        """Initialize connection / session."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Clean up connection / session."""
        pass

    @abstractmethod
    async def get_balance(self) -> Dict[str, float]:
        """Positive holdings keyed by venue asset code."""
        pass

    @abstractmethod
    async def get_current_price(self, pair: str) -> float:
        """Last trade price; raises on any failure."""
        pass

    @abstractmethod
    async def get_ticker(self, pair: str) -> Optional[float]:
        """Last trade price, or None on any failure."""
        pass

    @abstractmethod
    async def get_ohlc(self, pair: str) -> List[PricePoint]:
        """Hourly close history, or an empty list on any failure."""
        pass

    @abstractmethod
    async def place_buy_order(self, pair: str, amount: float, order_type: Optional[str] = None) -> str:
        pass

    @abstractmethod
    async def place_sell_order(self, pair: str, amount: float, order_type: Optional[str] = None) -> str:
        pass

    async def __aenter__(self) -> "BaseExchangeClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()
