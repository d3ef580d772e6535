"""Program-derived address search for SolFarm user-farm and obligation accounts."""
from __future__ import annotations

import hashlib
from typing import Sequence

from solders.pubkey import Pubkey

from ...errors import DerivationExhausted, MalformedData
from ...models import DerivedAddress

PDA_MARKER = b"ProgramDerivedAddress"
MAX_SEEDS = 16
MAX_SEED_LEN = 32

# The protocol always registers the user-farm account at index 0.
FARM_USER_ADDRESS_INDEX = 0


def _on_curve(candidate: bytes) -> bool:
    return Pubkey.from_bytes(candidate).is_on_curve()


def derive(seeds: Sequence[bytes], owner_program: Pubkey) -> DerivedAddress:
    """Find the program address for ``seeds``, searching bumps from 255 down.

    Each candidate is ``sha256(seeds || bump || program || marker)``; the
    first one that is not a valid ed25519 point wins.
    """
    seeds = tuple(bytes(s) for s in seeds)
    if len(seeds) >= MAX_SEEDS:
        raise MalformedData("seeds", f"at most {MAX_SEEDS - 1} seeds allowed")
    for seed in seeds:
        if len(seed) > MAX_SEED_LEN:
            raise MalformedData("seeds", f"seed of {len(seed)} bytes exceeds {MAX_SEED_LEN}")

    program = bytes(owner_program)
    for bump in range(255, -1, -1):
        hasher = hashlib.sha256()
        for seed in seeds:
            hasher.update(seed)
        hasher.update(bytes([bump]))
        hasher.update(program)
        hasher.update(PDA_MARKER)
        digest = hasher.digest()
        if not _on_curve(digest):
            return DerivedAddress(address=Pubkey.from_bytes(digest), bump=bump)

    raise DerivationExhausted(owner_program, seeds)


def _index_seed(value: int) -> bytes:
    """Single-byte tag in the first position of an 8-byte zeroed buffer."""
    if not 0 <= value <= 255:
        raise MalformedData("index", f"{value} does not fit in one byte")
    return bytes([value]) + bytes(7)


def user_farm_seeds(authority: Pubkey, farm_index: int) -> tuple[bytes, ...]:
    return (
        bytes(authority),
        bytes([FARM_USER_ADDRESS_INDEX]) * 8,
        _index_seed(farm_index),
    )


def obligation_seeds(
    authority: Pubkey, user_farm: Pubkey, obligation_index: int
) -> tuple[bytes, ...]:
    return (bytes(authority), bytes(user_farm), _index_seed(obligation_index))


def find_user_farm_address(
    authority: Pubkey, program_id: Pubkey, farm_index: int
) -> DerivedAddress:
    """Address of the user's participation account for one farm."""
    return derive(user_farm_seeds(authority, farm_index), program_id)


def find_user_farm_obligation_address(
    authority: Pubkey, user_farm: Pubkey, program_id: Pubkey, obligation_index: int
) -> DerivedAddress:
    """Address of the obligation held in ``obligation_index`` of a user farm."""
    return derive(obligation_seeds(authority, user_farm, obligation_index), program_id)
