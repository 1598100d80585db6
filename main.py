"""
Kraken Desk — Main Entry Point
One-shot market snapshot: prices, hourly history, balances and a neutral
allocation. Signal producers plug in where the HOLD placeholders are.
"""
import asyncio
from kraken_desk.config.settings import get_settings
from kraken_desk.data.models import SignalAction, TradingSignal
from kraken_desk.engines.allocation_engine import AllocationEngine
from kraken_desk.exchange.kraken_client import KrakenClient
from kraken_desk.utils.logger import setup_logging, get_logger

logger = get_logger("main")


async def run_snapshot() -> None:
    settings = get_settings()
    logger.info("starting_kraken_desk", version=settings.version)

    async with KrakenClient() as client:
        status = await client.check_connection()
        logger.info("venue_status", status=status.value)

        btc_price, eth_price, btc_history, eth_history = await asyncio.gather(
            client.get_ticker(settings.btc_pair),
            client.get_ticker(settings.eth_pair),
            client.get_ohlc(settings.btc_pair),
            client.get_ohlc(settings.eth_pair),
        )
        logger.info(
            "market_snapshot",
            btc_price=btc_price,
            eth_price=eth_price,
            btc_candles=len(btc_history),
            eth_candles=len(eth_history),
        )

        if settings.kraken.has_credentials:
            balances = await client.get_balance()
            logger.info("balances", **balances)

    neutral = TradingSignal(action=SignalAction.HOLD, confidence=0, strategy="Manual")
    decision = AllocationEngine().calculate_optimal_allocation(
        neutral, neutral,
        btc_price or 0.0, eth_price or 0.0,
        btc_history, eth_history,
    )
    logger.info("allocation", **decision.to_dict())


if __name__ == "__main__":
    setup_logging()
    asyncio.run(run_snapshot())
