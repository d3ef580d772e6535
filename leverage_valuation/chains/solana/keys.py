"""Address parsing helpers for Solana public keys."""
from __future__ import annotations

from solders.pubkey import Pubkey

from ...errors import MalformedData


def parse_pubkey(value: Pubkey | str | bytes, field: str = "address") -> Pubkey:
    """Coerce a base58 string or 32 raw bytes into a ``Pubkey``.

    Raises:
        MalformedData: when ``value`` is not a well-formed 32-byte key.
    """
    if isinstance(value, Pubkey):
        return value
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 32:
            raise MalformedData(field, f"expected 32 bytes, got {len(value)}")
        return Pubkey.from_bytes(bytes(value))
    try:
        return Pubkey.from_string(str(value).strip())
    except ValueError as e:
        raise MalformedData(field, f"invalid base58 key {value!r}") from e
