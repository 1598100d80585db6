"""
Kraken Desk — Unit Tests for Data Models and Helpers
"""
import pytest
from pydantic import ValidationError

from kraken_desk.data.models import (
    AllocationDecision, MarketSentiment, PricePoint, SignalAction, TradingSignal,
)
from kraken_desk.utils.helpers import clamp, format_volume, mean, safe_divide


class TestTradingSignal:
    def test_accepts_plain_strings(self):
        signal = TradingSignal(action="SELL", confidence=40, strategy="AI Ensemble")
        assert signal.action == SignalAction.SELL

    def test_confidence_is_clamped(self):
        assert TradingSignal(action="BUY", confidence=150, strategy="x").confidence == 100
        assert TradingSignal(action="BUY", confidence=-5, strategy="x").confidence == 0

    def test_rejects_unknown_action(self):
        with pytest.raises(ValidationError):
            TradingSignal(action="SHORT", confidence=50, strategy="x")

    def test_is_immutable(self):
        signal = TradingSignal(action="HOLD", confidence=10, strategy="x")
        with pytest.raises(ValidationError):
            signal.confidence = 20


class TestMarketSentiment:
    def test_defaults_last_update(self):
        sentiment = MarketSentiment(overall=0.2, fear_greed_index=55, social_media_buzz=1.0, news_volume=3)
        assert sentiment.last_update > 1_600_000_000_000

    def test_fear_greed_bounds(self):
        with pytest.raises(ValidationError):
            MarketSentiment(overall=0.0, fear_greed_index=101, social_media_buzz=0.0, news_volume=0)


class TestPricePointAndDecision:
    def test_price_must_be_positive(self):
        with pytest.raises(ValidationError):
            PricePoint(timestamp=1700000000, close=0.0)

    def test_split_must_sum_to_100(self):
        with pytest.raises(ValidationError):
            AllocationDecision(btc_percentage=60.0, eth_percentage=30.0, reasoning="", confidence=50)

    def test_bounds(self):
        with pytest.raises(ValidationError):
            AllocationDecision(btc_percentage=90.0, eth_percentage=10.0, reasoning="", confidence=50)
        with pytest.raises(ValidationError):
            AllocationDecision(btc_percentage=50.0, eth_percentage=50.0, reasoning="", confidence=99)

    def test_to_dict_rounds(self):
        decision = AllocationDecision(
            btc_percentage=100 / 3, eth_percentage=100 - 100 / 3, reasoning="r", confidence=60
        )
        assert decision.to_dict()["btc_percentage"] == 33.33


class TestHelpers:
    def test_clamp(self):
        assert clamp(150, 0, 100) == 100
        assert clamp(-10, 0, 100) == 0
        assert clamp(50, 0, 100) == 50

    def test_safe_divide(self):
        assert safe_divide(1, 0) == 0.0
        assert safe_divide(1, 4) == 0.25

    def test_mean(self):
        assert mean([]) == 0.0
        assert mean([1, 2, 3]) == 2.0

    @pytest.mark.parametrize("amount,expected", [
        (0.5, "0.5"),
        (2.0, "2"),
        (0.00001, "0.00001"),
        (1.123456789, "1.12345678"),
        (0.999999999, "0.99999999"),
        (1e-8, "0.00000001"),
    ])
    def test_format_volume(self, amount, expected):
        assert format_volume(amount) == expected

    @pytest.mark.parametrize("amount", [0.0, -1.0, 4e-9, float("nan"), float("inf"), float("-inf")])
    def test_format_volume_rejects_unplaceable_amounts(self, amount):
        with pytest.raises(ValueError):
            format_volume(amount)
