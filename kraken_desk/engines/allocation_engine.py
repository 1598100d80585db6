"""
Kraken Desk — Smart Allocation Engine
Splits capital between BTC and ETH from per-asset signals, price history
and optional market sentiment.

Scoring pipeline per asset:
    score = clamp(50 + signal_adjustment + strategy_bonus, 0, 100)
          + sentiment_adjustment      (fear -> BTC +15, greed -> ETH +10)
          + volatility_adjustment     (calmer asset +5, ties go to ETH)
          + momentum * 10

The clamp is applied before the last three terms, so final scores can
leave [0, 100]. Pure computation: no I/O and no state between calls.
"""
from typing import Optional, Sequence, Union
import numpy as np
import pandas as pd

from kraken_desk.data.models import (
    AllocationDecision, MarketSentiment, PricePoint, SignalAction, TradingSignal,
)
from kraken_desk.utils.helpers import clamp, mean, safe_divide
from kraken_desk.utils.logger import get_logger

logger = get_logger("allocation_engine")

BASE_SCORE = 50.0
BUY_WEIGHT = 30.0
SELL_WEIGHT = 20.0

STRATEGY_BONUS = {
    "Hybrid AI": 5.0,
    "Neural Network": 3.0,
    "AI Ensemble": 4.0,
    "News Sentiment": 2.0,
}

FEAR_THRESHOLD = 30
GREED_THRESHOLD = 70
FEAR_BTC_BONUS = 15.0
GREED_ETH_BONUS = 10.0
LOW_VOLATILITY_BONUS = 5.0
MOMENTUM_MULTIPLIER = 10.0

MIN_ALLOCATION_PCT = 20.0
MAX_ALLOCATION_PCT = 80.0
FAVORED_THRESHOLD_PCT = 65.0
MIN_CONFIDENCE = 50
MAX_CONFIDENCE = 95

PriceHistory = Sequence[Union[PricePoint, float]]


def _closes(history: PriceHistory) -> list:
    return [p.close if isinstance(p, PricePoint) else float(p) for p in history]


def score_signal(signal: TradingSignal) -> float:
    """Signal and strategy contribution, clamped to [0, 100]."""
    score = BASE_SCORE
    if signal.action == SignalAction.BUY:
        score += signal.confidence / 100.0 * BUY_WEIGHT
    elif signal.action == SignalAction.SELL:
        score -= signal.confidence / 100.0 * SELL_WEIGHT

    score += STRATEGY_BONUS.get(signal.strategy, 0.0)
    return clamp(score, 0.0, 100.0)


def calculate_volatility(history: PriceHistory) -> float:
    """
    Population standard deviation (ddof=0) of period-over-period returns.

    A return off a zero close counts as 0. Fewer than two points give 0.
    """
    closes = pd.Series(_closes(history), dtype=float)
    if len(closes) < 2:
        return 0.0
    returns = closes.pct_change().iloc[1:]
    returns = returns.replace([np.inf, -np.inf], np.nan).fillna(0.0)
    return float(returns.std(ddof=0))


def calculate_momentum(history: PriceHistory) -> float:
    """
    Relative change of the last three closes against the three before them.

    With five points the windows overlap (older = first three); below five
    points momentum is 0.
    """
    closes = _closes(history)
    if len(closes) < 5:
        return 0.0
    recent = mean(closes[-3:])
    older = mean(closes[-6:][:3])
    return safe_divide(recent - older, older)


class AllocationEngine:
    """Stateless BTC/ETH allocation calculator; safe to share across tasks."""

    def calculate_optimal_allocation(
        self,
        btc_signal: TradingSignal,
        eth_signal: TradingSignal,
        btc_price: float,
        eth_price: float,
        btc_history: PriceHistory,
        eth_history: PriceHistory,
        sentiment: Optional[MarketSentiment] = None,
    ) -> AllocationDecision:
        btc_score = score_signal(btc_signal)
        eth_score = score_signal(eth_signal)

        if sentiment is not None:
            if sentiment.fear_greed_index < FEAR_THRESHOLD:
                btc_score += FEAR_BTC_BONUS
            elif sentiment.fear_greed_index > GREED_THRESHOLD:
                eth_score += GREED_ETH_BONUS

        btc_volatility = calculate_volatility(btc_history)
        eth_volatility = calculate_volatility(eth_history)
        if btc_volatility < eth_volatility:
            btc_score += LOW_VOLATILITY_BONUS
        else:
            eth_score += LOW_VOLATILITY_BONUS

        btc_momentum = calculate_momentum(btc_history)
        eth_momentum = calculate_momentum(eth_history)
        btc_score += btc_momentum * MOMENTUM_MULTIPLIER
        eth_score += eth_momentum * MOMENTUM_MULTIPLIER

        total = btc_score + eth_score
        if total > 0:
            btc_pct = clamp(btc_score / total * 100, MIN_ALLOCATION_PCT, MAX_ALLOCATION_PCT)
            confidence = int(clamp(abs(btc_score - eth_score) / total * 100, MIN_CONFIDENCE, MAX_CONFIDENCE))
        else:
            btc_pct = 50.0
            confidence = MIN_CONFIDENCE
        eth_pct = 100.0 - btc_pct

        reasoning = self._build_reasoning(
            btc_score, eth_score, btc_pct, eth_pct, btc_signal, eth_signal, sentiment
        )

        logger.debug(
            "allocation_calculated",
            btc_price=btc_price,
            eth_price=eth_price,
            btc_score=round(btc_score, 2),
            eth_score=round(eth_score, 2),
            btc_volatility=btc_volatility,
            eth_volatility=eth_volatility,
            btc_momentum=btc_momentum,
            eth_momentum=eth_momentum,
            btc_pct=round(btc_pct, 2),
            confidence=confidence,
        )

        return AllocationDecision(
            btc_percentage=btc_pct,
            eth_percentage=eth_pct,
            reasoning=reasoning,
            confidence=confidence,
        )

    @staticmethod
    def _build_reasoning(
        btc_score: float,
        eth_score: float,
        btc_pct: float,
        eth_pct: float,
        btc_signal: TradingSignal,
        eth_signal: TradingSignal,
        sentiment: Optional[MarketSentiment],
    ) -> str:
        parts = [f"BTC Score: {btc_score:.1f}, ETH Score: {eth_score:.1f}."]

        if btc_pct > FAVORED_THRESHOLD_PCT:
            lead = "BTC favored due to"
        elif eth_pct > FAVORED_THRESHOLD_PCT:
            lead = "ETH favored due to"
        else:
            lead = "Balanced allocation due to"

        if btc_signal.confidence > eth_signal.confidence:
            parts.append(
                f"{lead} stronger BTC signal ({btc_signal.confidence}% vs {eth_signal.confidence}%)."
            )
        elif eth_signal.confidence > btc_signal.confidence:
            parts.append(
                f"{lead} stronger ETH signal ({eth_signal.confidence}% vs {btc_signal.confidence}%)."
            )
        else:
            parts.append(f"{lead} equal signal confidence ({btc_signal.confidence}%).")

        if sentiment is not None:
            parts.append(f"Market fear/greed: {sentiment.fear_greed_index}.")

        return " ".join(parts)
