"""Valuation error taxonomy — every failure is terminal for the request."""
from __future__ import annotations

from typing import Any


class ValuationError(Exception):
    """Base class for all valuation failures."""


class DerivationExhausted(ValuationError):
    """No bump in [0, 255] produced an off-curve program address."""

    def __init__(self, program_id: Any, seeds: tuple[bytes, ...]) -> None:
        self.program_id = program_id
        self.seeds = seeds
        super().__init__(
            f"No off-curve bump found for program {program_id} "
            f"({len(seeds)} seeds)"
        )


class LayoutMismatch(ValuationError):
    """Raw account data does not have the record's fixed size."""

    def __init__(self, layout: str, expected: int, actual: int) -> None:
        self.layout = layout
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{layout} record must be {expected} bytes, got {actual}"
        )


class MalformedData(ValuationError):
    """A field holds a value that cannot be interpreted."""

    def __init__(self, field: str, detail: str) -> None:
        self.field = field
        self.detail = detail
        super().__init__(f"Malformed {field}: {detail}")


class AccountNotFound(ValuationError):
    """A required on-chain account does not exist."""

    def __init__(self, address: Any, role: str) -> None:
        self.address = address
        self.role = role
        super().__init__(f"{role} account {address} not found")


class ObligationNotFound(ValuationError):
    """None of the candidate obligation slots holds an account."""

    def __init__(self, user: Any, farm_index: int, slots: tuple[int, ...]) -> None:
        self.user = user
        self.farm_index = farm_index
        self.slots = slots
        super().__init__(
            f"No obligation for user {user} on farm {farm_index} "
            f"(probed slots {list(slots)})"
        )


class DivisionByZero(ValuationError):
    """A divisor in the valuation pipeline is zero."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Cannot divide by zero {field}")


class EmptyPosition(ValuationError):
    """The user's vault shares convert to zero LP tokens."""

    def __init__(self, vault_shares: int) -> None:
        self.vault_shares = vault_shares
        super().__init__(f"No LP tokens found for {vault_shares} vault shares")


class NoBorrowRecord(ValuationError):
    """Both borrow legs of a leveraged obligation are zero."""

    def __init__(
        self, vault_shares: int, borrow_one_reserve: Any, borrow_two_reserve: Any
    ) -> None:
        self.vault_shares = vault_shares
        self.borrow_one_reserve = borrow_one_reserve
        self.borrow_two_reserve = borrow_two_reserve
        super().__init__(
            f"Obligation with {vault_shares} vault shares has no outstanding borrow "
            f"(reserves {borrow_one_reserve}, {borrow_two_reserve})"
        )


class UnknownAsset(ValuationError):
    """The asset catalog has no entry for an address."""

    def __init__(self, address: Any, kind: str) -> None:
        self.address = address
        self.kind = kind
        super().__init__(f"No asset registered for {kind} {address}")


class PriceUnavailable(ValuationError):
    """The price oracle could not produce a positive quote."""

    def __init__(self, asset_id: str, reason: str) -> None:
        self.asset_id = asset_id
        self.reason = reason
        super().__init__(f"Price unavailable for {asset_id}: {reason}")


class TransportError(ValuationError):
    """No RPC endpoint could be reached for a ledger read."""

    def __init__(self, method: str, reason: Any, address: Any = None) -> None:
        self.method = method
        self.reason = reason
        self.address = address
        target = f" ({address})" if address is not None else ""
        super().__init__(
            f"All RPC endpoints failed for {method}{target}. Last error: {reason}"
        )


class RequestRejected(MalformedData):
    """An RPC node answered a ledger read with a JSON-RPC error."""

    def __init__(
        self, method: str, code: int | None, message: str, address: Any = None
    ) -> None:
        self.method = method
        self.code = code
        self.message = message
        self.address = address
        target = f" ({address})" if address is not None else ""
        super().__init__(f"{method}{target} request", f"RPC error {code}: {message}")
