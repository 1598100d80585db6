"""
Kraken Desk — Data Models
Value types shared by the allocation engine, the exchange client and their callers.
"""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Dict, Any
from enum import Enum

from kraken_desk.utils.helpers import clamp, now_millis


class SignalAction(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


class OrderSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


class ConnectionStatus(str, Enum):
    CONNECTED = "CONNECTED"
    DISCONNECTED = "DISCONNECTED"
    CONNECTING = "CONNECTING"
    ERROR = "ERROR"


class TradingSignal(BaseModel):
    """Per-asset recommendation produced by a strategy outside this package."""
    action: SignalAction
    confidence: int  # 0-100
    strategy: str

    class Config:
        frozen = True

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, value: Any) -> int:
        return int(clamp(float(value), 0, 100))


class MarketSentiment(BaseModel):
    """Aggregated market mood supplied by the news/sentiment collector."""
    overall: float
    fear_greed_index: int = Field(ge=0, le=100)
    social_media_buzz: float
    news_volume: int = Field(ge=0)
    last_update: int = Field(default_factory=now_millis)  # epoch millis

    class Config:
        frozen = True


class PricePoint(BaseModel):
    """Close price of one hourly candle."""
    timestamp: int  # open time, epoch seconds
    close: float = Field(gt=0)

    class Config:
        frozen = True


class AllocationDecision(BaseModel):
    """Capital split between BTC and ETH."""
    btc_percentage: float = Field(ge=20, le=80)
    eth_percentage: float
    reasoning: str
    confidence: int = Field(ge=50, le=95)

    class Config:
        frozen = True

    @model_validator(mode="after")
    def check_split(self) -> "AllocationDecision":
        if abs(self.btc_percentage + self.eth_percentage - 100.0) > 1e-9:
            raise ValueError("btc_percentage and eth_percentage must sum to 100")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "btc_percentage": round(self.btc_percentage, 2),
            "eth_percentage": round(self.eth_percentage, 2),
            "reasoning": self.reasoning,
            "confidence": self.confidence,
        }
