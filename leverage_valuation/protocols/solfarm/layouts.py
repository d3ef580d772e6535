"""Fixed binary layouts of the accounts a leveraged farm position touches.

All integers are little-endian. ``16s`` fields hold u128 values and
``32s`` fields hold public keys. Decoders only reinterpret bytes; no
arithmetic happens here.
"""
from __future__ import annotations

import logging
import struct

from solders.pubkey import Pubkey

from ...errors import LayoutMismatch, MalformedData
from ...models import (
    AmmPoolState,
    BorrowLeg,
    MintState,
    ObligationRecord,
    OpenOrdersState,
    PoolVaultKind,
    VaultState,
)

logger = logging.getLogger(__name__)

# discriminator, authority, token_program, pda_token_account, pda,
# nonce, info_nonce, reward_a_nonce, reward_b_nonce, swap_to_nonce,
# total_vault_balance, info_account, lp_token_account, lp_token_mint,
# reward_a_account, reward_b_account, swap_to_account, total_vlp_shares
RAYDIUM_VAULT_LAYOUT = struct.Struct("<8s32s32s32s32sBBBBBQ32s32s32s32s32s32sQ")

# discriminator, authority, token_program, pda_token_account, pda,
# nonce, info_nonce, reward_nonce, dd_reward_nonce, swap_to_nonce,
# total_vault_balance, info_account, lp_token_account, lp_token_mint,
# reward_account, swap_to_account, total_vlp_shares, farm_token_account,
# dd_farm_token_account, fee_collector, dd_compound_nonce, dd_swap_account
ORCA_VAULT_LAYOUT = struct.Struct(
    "<8s32s32s32s32sBBBBBQ32s32s32s32s32sQ32s32s32sB32s"
)

# SPL token mint: authority option, authority, supply, decimals,
# is_initialized, freeze authority option, freeze authority
MINT_LAYOUT = struct.Struct("<I32sQBBI32s")

_BORROW = "32s16s16s16s"  # borrow_reserve, cumulative_rate, amount_wads, market_value

# version, last_update_slot, stale, lending_market, owner, borrowed_value,
# vault_shares, lp_tokens, coin_deposits, pc_deposits, deposits_market_value,
# lp_decimals, coin_decimals, pc_decimals, deposits_len, borrows_len,
# borrow one, borrow two, position_state, user_farm, obligation_index
LENDING_OBLIGATION_LAYOUT = struct.Struct(
    "<BQB32s32s16sQQQQ16sBBBBB" + _BORROW + _BORROW + "H32sB"
)

# Raydium AMM v4: 16 u64 params, 8 u64 fee fractions, 4 u64 pnl counters,
# 2 u128 deposit totals, swap counters, 13 account keys
AMM_INFO_LAYOUT_V4 = struct.Struct("<" + "Q" * 28 + "16s16s16s16sQ16s16sQ" + "32s" * 13)

# Serum open orders: "serum" head, account flags, market, owner,
# base free/total, quote free/total, free slot bits, is-bid bits,
# 128 order ids, 128 client ids, referrer rebates, "padding" tail
OPEN_ORDERS_LAYOUT = struct.Struct("<5s8s32s32sQQQQ16s16s2048s1024sQ7s")

SERUM_HEAD = b"serum"
SERUM_TAIL = b"padding"


def _u128(raw: bytes) -> int:
    return int.from_bytes(raw, "little")


def _pubkey(raw: bytes, field: str) -> Pubkey:
    if len(raw) != 32:
        raise MalformedData(field, f"expected 32-byte key, got {len(raw)} bytes")
    return Pubkey.from_bytes(raw)


def _unpack(layout: struct.Struct, name: str, data: bytes) -> tuple:
    if len(data) != layout.size:
        raise LayoutMismatch(name, layout.size, len(data))
    return layout.unpack(data)


def decode_vault(data: bytes, kind: PoolVaultKind = PoolVaultKind.RAYDIUM) -> VaultState:
    """Decode a Raydium or Orca vault account into its balance/share totals."""
    if kind == PoolVaultKind.RAYDIUM:
        fields = _unpack(RAYDIUM_VAULT_LAYOUT, "raydium vault", data)
        balance, shares = fields[10], fields[17]
        _pubkey(fields[13], "lp_token_mint")
    else:
        fields = _unpack(ORCA_VAULT_LAYOUT, "orca vault", data)
        balance, shares = fields[10], fields[16]
        _pubkey(fields[13], "lp_token_mint")
    return VaultState(total_vault_balance=balance, total_vlp_shares=shares)


def decode_mint(data: bytes) -> MintState:
    fields = _unpack(MINT_LAYOUT, "mint", data)
    return MintState(supply=fields[2], decimals=fields[3])


def decode_obligation(data: bytes) -> ObligationRecord:
    """Decode a leveraged-farm lending obligation."""
    fields = _unpack(LENDING_OBLIGATION_LAYOUT, "lending obligation", data)
    borrow_one = BorrowLeg(
        borrowed_amount_wads=_u128(fields[18]),
        borrow_reserve=_pubkey(fields[16], "obligationBorrowOne.borrowReserve"),
    )
    borrow_two = BorrowLeg(
        borrowed_amount_wads=_u128(fields[22]),
        borrow_reserve=_pubkey(fields[20], "obligationBorrowTwo.borrowReserve"),
    )
    record = ObligationRecord(
        vault_shares=fields[6],
        coin_decimals=fields[12],
        pc_decimals=fields[13],
        borrow_one=borrow_one,
        borrow_two=borrow_two,
    )
    logger.debug(
        "Decoded obligation: vault_shares=%d borrow_one=%d borrow_two=%d",
        record.vault_shares,
        borrow_one.borrowed_amount_wads,
        borrow_two.borrowed_amount_wads,
    )
    return record


def decode_amm_info(data: bytes) -> AmmPoolState:
    fields = _unpack(AMM_INFO_LAYOUT_V4, "amm info v4", data)
    return AmmPoolState(need_take_pnl_coin=fields[24], need_take_pnl_pc=fields[25])


def decode_open_orders(data: bytes) -> OpenOrdersState:
    fields = _unpack(OPEN_ORDERS_LAYOUT, "open orders", data)
    if fields[0] != SERUM_HEAD:
        raise MalformedData("open_orders.head", f"expected {SERUM_HEAD!r}, got {fields[0]!r}")
    if fields[13] != SERUM_TAIL:
        raise MalformedData("open_orders.tail", f"expected {SERUM_TAIL!r}, got {fields[13]!r}")
    _pubkey(fields[2], "open_orders.market")
    _pubkey(fields[3], "open_orders.owner")
    return OpenOrdersState(base_token_total=fields[5], quote_token_total=fields[7])
