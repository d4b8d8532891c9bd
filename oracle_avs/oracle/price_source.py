from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

import bittensor as bt
import httpx

from oracle_avs.errors import UpstreamError
from oracle_avs.protocol import PriceQuote


class PriceSource(ABC):
    """Anything that can quote a symbol as a decimal string."""

    @abstractmethod
    async def get_price(self, symbol: str) -> PriceQuote:
        raise NotImplementedError


class BinancePriceSource(PriceSource):
    """Spot ticker quotes (`GET <url>?symbol=ETHUSDT` -> `{"symbol", "price"}`)."""

    def __init__(
        self,
        price_api_url: str,
        *,
        timeout_s: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.price_api_url = price_api_url
        if client is not None:
            self.client = client
            self._should_close = False
        else:
            self.client = httpx.AsyncClient(timeout=timeout_s)
            self._should_close = True

    async def aclose(self) -> None:
        if self._should_close:
            await self.client.aclose()

    async def get_price(self, symbol: str) -> PriceQuote:
        try:
            resp = await self.client.get(self.price_api_url, params={"symbol": symbol})
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise UpstreamError(f"Error fetching price for {symbol}: {exc}") from exc

        if not isinstance(data, dict) or not isinstance(data.get("price"), str):
            raise UpstreamError(f"Malformed price payload for {symbol}: {data!r}")

        quote = PriceQuote(symbol=str(data.get("symbol") or symbol), price=data["price"])
        bt.logging.debug(f"Price {quote.symbol}: {quote.price}")
        return quote
