"""Solana JSON-RPC client with fallback support."""
import base64
import binascii
import logging
import ssl
from typing import Any

import aiohttp
import certifi
from solders.pubkey import Pubkey

from ...config import ChainConfig
from ...errors import AccountNotFound, MalformedData, RequestRejected, TransportError
from ...models import TokenBalance

logger = logging.getLogger(__name__)

# JSON-RPC "invalid params"; returned for token accounts that do not exist
INVALID_PARAMS = -32602


class SolanaClient:
    """Solana RPC client with automatic endpoint fallback."""

    def __init__(self, config: ChainConfig) -> None:
        self.endpoints = list(config.rpc_endpoints)
        self.timeout = config.rpc_timeout
        self.commitment = config.commitment
        self.current_rpc_index = 0

    async def rpc_call(
        self, method: str, params: list[Any], address: Pubkey | None = None
    ) -> Any:
        """Make RPC call with fallback to alternative endpoints.

        Only unreachable endpoints are skipped. A JSON-RPC error answer is
        raised as ``RequestRejected`` without trying the next endpoint.
        """
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}

        ssl_context = ssl.create_default_context(cafile=certifi.where())

        last_error: Exception | None = None
        for attempt in range(len(self.endpoints)):
            rpc_index = (self.current_rpc_index + attempt) % len(self.endpoints)
            rpc_url = self.endpoints[rpc_index]

            try:
                connector = aiohttp.TCPConnector(ssl=ssl_context)
                async with aiohttp.ClientSession(connector=connector) as session:
                    async with session.post(
                        rpc_url,
                        json=payload,
                        timeout=aiohttp.ClientTimeout(total=self.timeout),
                    ) as response:
                        result = await response.json()
            except Exception as e:
                last_error = e
                logger.warning("RPC endpoint %s failed: %s", rpc_url, e)
                if attempt < len(self.endpoints) - 1:
                    logger.info("Trying next endpoint...")
                continue

            if rpc_index != self.current_rpc_index:
                logger.info("Switched to RPC endpoint: %s", rpc_url)
                self.current_rpc_index = rpc_index

            error = result.get("error")
            if error is not None:
                code = error.get("code") if isinstance(error, dict) else None
                message = error.get("message", "") if isinstance(error, dict) else str(error)
                raise RequestRejected(method, code, message, address)

            return result.get("result")

        raise TransportError(method, last_error, address)

    async def get_account(self, address: Pubkey) -> bytes | None:
        """Fetch raw account data; ``None`` when the account does not exist."""
        result = await self.rpc_call(
            "getAccountInfo",
            [str(address), {"encoding": "base64", "commitment": self.commitment}],
            address,
        )
        value = (result or {}).get("value")
        if value is None:
            logger.debug("Account %s not found", address)
            return None

        data = value.get("data", ["", "base64"])
        encoded = data[0] if isinstance(data, list) else data
        try:
            return base64.b64decode(encoded)
        except (binascii.Error, TypeError) as e:
            raise MalformedData(f"account {address} data", "invalid base64") from e


    async def get_token_balance(self, address: Pubkey) -> TokenBalance:
        """Fetch an SPL token account balance as raw amount + decimals."""
        try:
            result = await self.rpc_call(
                "getTokenAccountBalance",
                [str(address), {"commitment": self.commitment}],
                address,
            )
        except RequestRejected as e:
            if e.code == INVALID_PARAMS:
                raise AccountNotFound(address, "token account") from e
            raise

        value = (result or {}).get("value")
        if not value:
            raise AccountNotFound(address, "token account")

        try:
            return TokenBalance(
                amount=int(value["amount"]), decimals=int(value["decimals"])
            )
        except (KeyError, ValueError) as e:
            raise MalformedData(f"token balance {address}", str(e)) from e
