"""
Kraken Desk — Kraken REST Client
Signed private calls (balances, orders) and public market data over aiohttp.

Error policy differs per operation: get_balance, get_current_price,
fetch_ohlc and order placement raise KrakenError subclasses, while
get_ticker, get_ohlc and check_connection never raise and return an
empty value instead. Polling loops depend on the latter; the order and
balance paths must surface failures to the caller.
"""
import asyncio
import json
from typing import Any, Dict, List, Mapping, Optional

import aiohttp

from kraken_desk.config.settings import KrakenSettings, get_settings
from kraken_desk.data.models import ConnectionStatus, OrderSide, PricePoint
from kraken_desk.exchange.base import BaseExchangeClient
from kraken_desk.exchange.errors import KrakenError, ParseError, TransportError, VenueError
from kraken_desk.exchange.signing import encode_body, get_nonce_generator, sign_request
from kraken_desk.utils.helpers import format_volume
from kraken_desk.utils.logger import get_logger

logger = get_logger("kraken_client")

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class KrakenClient(BaseExchangeClient):
    """
    Kraken REST client.

    The HTTP session may be injected; any object exposing aiohttp's
    ``get``/``post`` async-context-manager contract works. Without one the
    client creates its own session on first use and closes it on disconnect.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        settings: Optional[KrakenSettings] = None,
    ):
        super().__init__(venue="kraken")
        self.settings = settings or get_settings().kraken
        self.api_key = api_key if api_key is not None else self.settings.kraken_api_key
        self._api_secret = api_secret if api_secret is not None else self.settings.kraken_api_secret
        self.base_url = self.settings.kraken_base_url.rstrip("/")
        self._session = session
        self._owns_session = session is None

    async def connect(self) -> None:
        if self._session is not None:
            return
        timeout = aiohttp.ClientTimeout(
            connect=self.settings.connect_timeout_seconds,
            sock_read=self.settings.read_timeout_seconds,
        )
        self._session = aiohttp.ClientSession(timeout=timeout)
        self._owns_session = True
        logger.info("kraken_client_connected", base_url=self.base_url)

    async def disconnect(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None
            logger.info("kraken_client_disconnected")

    # ─── Transport ───────────────────────────────────────────────

    async def _private_request(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Signed POST to /0/private/<endpoint>; returns the envelope's result."""
        if not (self.api_key and self._api_secret):
            raise ValueError("Kraken API credentials are not configured")
        if self._session is None:
            await self.connect()

        url_path = f"/0/private/{endpoint}"
        # Consumed even if the request is cancelled; never reused
        nonce = get_nonce_generator(self.api_key).next()
        body = encode_body({**(params or {}), "nonce": nonce})
        headers = {
            "API-Key": self.api_key,
            "API-Sign": sign_request(url_path, body, nonce, self._api_secret),
            "Content-Type": FORM_CONTENT_TYPE,
        }
        request = self._session.post(f"{self.base_url}{url_path}", data=body, headers=headers)
        return await self._read(request, endpoint)

    async def _public_request(self, endpoint: str, params: Optional[Mapping[str, str]] = None) -> Any:
        """Unsigned GET to /0/public/<endpoint>; returns the envelope's result."""
        if self._session is None:
            await self.connect()
        request = self._session.get(f"{self.base_url}/0/public/{endpoint}", params=dict(params or {}))
        return await self._read(request, endpoint)

    async def _read(self, request, endpoint: str) -> Any:
        try:
            async with request as resp:
                status = resp.status
                reason = resp.reason
                try:
                    text = await resp.text()
                except UnicodeDecodeError as e:
                    if not 200 <= status < 300:
                        raise TransportError(status, reason or "undecodable body") from e
                    raise ParseError("body", e.object[:200]) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(None, f"{endpoint}: {str(e) or type(e).__name__}") from e

        if not 200 <= status < 300:
            raise TransportError(status, reason or text[:200])
        return self._unwrap(text)

    @staticmethod
    def _unwrap(text: str) -> Any:
        """Validate the {"error": [...], "result": ...} envelope."""
        try:
            payload = json.loads(text)
        except ValueError as e:
            raise ParseError("body", text) from e
        if not isinstance(payload, dict):
            raise ParseError("body", text)

        errors = payload.get("error") or []
        if errors:
            raise VenueError([str(message) for message in errors])
        if "result" not in payload:
            raise ParseError("result", text)
        return payload["result"]

    # ─── Account ─────────────────────────────────────────────────

    async def get_balance(self) -> Dict[str, float]:
        """Positive balances keyed by Kraken asset code (e.g. XXBT, ZUSD)."""
        try:
            result = await self._private_request("Balance")
            if not isinstance(result, dict):
                raise ParseError("result", result)
        except KrakenError as e:
            logger.error("kraken_balance_exception", error=str(e))
            raise

        balances: Dict[str, float] = {}
        for asset, raw in result.items():
            try:
                amount = float(raw)
            except (TypeError, ValueError):
                amount = 0.0
            if amount > 0.0:
                balances[asset] = amount
        return balances

    # ─── Market data ─────────────────────────────────────────────

    async def get_current_price(self, pair: str) -> float:
        """Last trade price for a pair."""
        try:
            result = await self._public_request("Ticker", {"pair": pair})
            return self._parse_last_price(result)
        except KrakenError as e:
            logger.error("kraken_price_exception", pair=pair, error=str(e))
            raise

    async def get_ticker(self, pair: str) -> Optional[float]:
        """Like get_current_price, but None on any failure."""
        try:
            return await self.get_current_price(pair)
        except Exception as e:
            logger.warning("kraken_ticker_unavailable", pair=pair, error=str(e))
            return None

    async def fetch_ohlc(self, pair: str) -> List[PricePoint]:
        """Hourly close history; raises on failure."""
        params = {"pair": pair, "interval": str(self.settings.ohlc_interval_minutes)}
        result = await self._public_request("OHLC", params)
        return self._parse_candles(result)

    async def get_ohlc(self, pair: str) -> List[PricePoint]:
        """Hourly close history, or an empty list on any failure."""
        try:
            return await self.fetch_ohlc(pair)
        except Exception as e:
            logger.error("kraken_ohlc_exception", pair=pair, error=str(e))
            return []

    @staticmethod
    def _parse_last_price(result: Any) -> float:
        # Keyed by the venue's pair name (XXBTZUSD), not the requested one (XBTUSD)
        if not isinstance(result, dict) or not result:
            raise ParseError("result", result)
        pair_data = next(iter(result.values()))
        try:
            return float(pair_data["c"][0])
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raw = pair_data.get("c") if isinstance(pair_data, dict) else pair_data
            raise ParseError("c", raw) from e

    @staticmethod
    def _parse_candles(result: Any) -> List[PricePoint]:
        if not isinstance(result, dict):
            raise ParseError("result", result)
        # "last" is the pagination cursor that sits beside the candle array
        candles = next(
            (value for key, value in result.items() if key != "last" and isinstance(value, list)),
            None,
        )
        if candles is None:
            raise ParseError("result", result)

        history: List[PricePoint] = []
        for candle in candles:
            try:
                timestamp = int(candle[0])
                close = float(candle[4])
            except (IndexError, KeyError, TypeError, ValueError) as e:
                raise ParseError("candle", candle) from e
            if close <= 0:
                raise ParseError("close", candle[4])
            history.append(PricePoint(timestamp=timestamp, close=close))
        return history

    async def check_connection(self) -> ConnectionStatus:
        """Probe the venue's system status; never raises."""
        try:
            result = await self._public_request("SystemStatus")
        except TransportError as e:
            logger.warning("kraken_unreachable", error=str(e))
            return ConnectionStatus.DISCONNECTED
        except Exception as e:
            logger.error("kraken_status_exception", error=str(e))
            return ConnectionStatus.ERROR

        status = result.get("status") if isinstance(result, dict) else None
        if status == "online":
            return ConnectionStatus.CONNECTED
        logger.warning("kraken_system_degraded", status=status)
        return ConnectionStatus.ERROR

    # ─── Orders ──────────────────────────────────────────────────

    async def place_buy_order(self, pair: str, amount: float, order_type: Optional[str] = None) -> str:
        return await self._place_order(OrderSide.BUY, pair, amount, order_type)

    async def place_sell_order(self, pair: str, amount: float, order_type: Optional[str] = None) -> str:
        return await self._place_order(OrderSide.SELL, pair, amount, order_type)

    async def _place_order(
        self, side: OrderSide, pair: str, amount: float, order_type: Optional[str]
    ) -> str:
        """Submit an AddOrder request and return the venue transaction id."""
        # ValueError for non-finite amounts or ones below 1e-8
        volume = format_volume(amount)
        params = {
            "pair": pair,
            "type": side.value,
            "ordertype": order_type or self.settings.default_order_type,
            "volume": volume,
        }
        try:
            result = await self._private_request("AddOrder", params)
            txids = result.get("txid") if isinstance(result, dict) else None
            if not isinstance(txids, list) or not txids or not txids[0]:
                raise ParseError("txid", txids)
        except KrakenError as e:
            logger.error("kraken_order_exception", side=side.value, pair=pair, volume=volume, error=str(e))
            raise

        order_id = str(txids[0])
        description = result.get("descr") or {}
        logger.info(
            "kraken_order_placed",
            side=side.value,
            pair=pair,
            volume=volume,
            order_id=order_id,
            description=description.get("order") if isinstance(description, dict) else None,
        )
        return order_id
