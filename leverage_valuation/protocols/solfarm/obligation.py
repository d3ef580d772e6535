"""Locate a user's leveraged obligation among the user-farm slots."""
from __future__ import annotations

import logging
from typing import Iterator, Sequence

from solders.pubkey import Pubkey

from ...errors import ObligationNotFound
from ...interfaces.ledger import LedgerReader
from ...models import ObligationRecord
from .derivation import find_user_farm_address, find_user_farm_obligation_address
from .layouts import decode_obligation

logger = logging.getLogger(__name__)

OBLIGATION_SLOTS = (0, 1, 2)


class ObligationLocator:
    """Probe obligation slots in ascending order, stopping at the first hit."""

    def __init__(
        self,
        ledger: LedgerReader,
        program_id: Pubkey,
        slots: Sequence[int] = OBLIGATION_SLOTS,
    ) -> None:
        self._ledger = ledger
        self._program_id = program_id
        self._slots = tuple(sorted(slots))

    def candidates(self, user: Pubkey, farm_index: int) -> Iterator[tuple[int, Pubkey]]:
        """Yield ``(slot, obligation address)`` lazily, lowest slot first."""
        user_farm = find_user_farm_address(user, self._program_id, farm_index)
        for slot in self._slots:
            derived = find_user_farm_obligation_address(
                user, user_farm.address, self._program_id, slot
            )
            yield slot, derived.address

    async def locate(self, user: Pubkey, farm_index: int) -> ObligationRecord:
        """Return the first existing obligation for ``user`` on ``farm_index``.

        Raises:
            ObligationNotFound: when every candidate slot is absent.
        """
        for slot, address in self.candidates(user, farm_index):
            data = await self._ledger.get_account(address)
            if data is None:
                logger.debug("Obligation slot %d (%s) is empty", slot, address)
                continue
            logger.debug("Obligation found in slot %d at %s", slot, address)
            return decode_obligation(data)

        raise ObligationNotFound(user, farm_index, self._slots)
