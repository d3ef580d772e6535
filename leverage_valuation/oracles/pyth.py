"""Pyth Network price oracle service."""
from __future__ import annotations

import logging
import ssl
from decimal import Decimal, InvalidOperation
from typing import Iterable

import aiohttp
import certifi

from ..config import PythConfig
from ..errors import PriceUnavailable

logger = logging.getLogger(__name__)


def _normalize_feed_id(feed_id: str) -> str:
    """Hermes returns ids without the ``0x`` prefix, in lower case."""
    feed_id = feed_id.strip().lower()
    return feed_id[2:] if feed_id.startswith("0x") else feed_id


def parse_price(price_data: dict) -> Decimal:
    """Convert a Hermes ``{"price": ..., "expo": ...}`` pair to a Decimal."""
    price_raw = int(price_data.get("price", 0))
    expo = int(price_data.get("expo", 0))
    return Decimal(price_raw).scaleb(expo)


class PythOracle:
    """Fetch USD quotes from the Pyth Network Hermes service."""

    def __init__(self, config: PythConfig) -> None:
        self.hermes_url = config.hermes_url
        self.timeout = config.timeout

    async def quote(self, asset_id: str) -> Decimal:
        """Return the positive USD price for a single Pyth feed id."""
        quotes = await self.fetch_quotes([asset_id])
        return quotes[asset_id]

    async def fetch_quotes(self, asset_ids: Iterable[str]) -> dict[str, Decimal]:
        """Fetch current prices for the given feed ids in one request.

        Raises:
            PriceUnavailable: on HTTP/network failure, or when a requested
                feed is missing from the response or not positive.
        """
        requested = {_normalize_feed_id(a): a for a in asset_ids}
        if not requested:
            return {}

        query_params = "&".join([f"ids[]={fid}" for fid in sorted(requested)])
        url = f"{self.hermes_url}?{query_params}"

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        first_id = next(iter(requested.values()))
        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(
                    url, timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from Pyth: HTTP %s", response.status
                        )
                        raise PriceUnavailable(first_id, f"HTTP {response.status}")
                    data = await response.json()
        except PriceUnavailable:
            raise
        except Exception as e:
            logger.error("Error fetching prices from Pyth: %s", e)
            raise PriceUnavailable(first_id, str(e)) from e

        quotes: dict[str, Decimal] = {}
        for item in data.get("parsed", []):
            feed_id = _normalize_feed_id(str(item.get("id", "")))
            if feed_id not in requested:
                continue
            try:
                price = parse_price(item.get("price", {}))
            except (InvalidOperation, ValueError, TypeError) as e:
                raise PriceUnavailable(requested[feed_id], f"unparseable price: {e}") from e
            if price <= 0:
                raise PriceUnavailable(requested[feed_id], f"non-positive price {price}")
            quotes[requested[feed_id]] = price

        for asset_id in requested.values():
            if asset_id not in quotes:
                raise PriceUnavailable(asset_id, "feed missing from Hermes response")

        logger.info("Fetched prices from Pyth Network:")
        for asset_id, price in sorted(quotes.items()):
            logger.info("  %s: $%s", asset_id, price)

        return quotes
