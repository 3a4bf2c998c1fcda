"""
Issuance-state account decoding, layout v1.

Byte layout (half-open ranges, little-endian):

    version              u8     [0]
    bump                 u8     [1]
    issuer_address       32B    [2, 34)
    lock_mint            32B    [34, 66)
    reward_mint          32B    [66, 98)
    deposit_escrow       32B    [98, 130)
    reward_escrow        32B    [130, 162)
    platform_treasury    32B    [162, 194)
    reserve_total        u128   [194, 210)
    start_ts             i64    [210, 218)
    maturity_ts          i64    [218, 226)
    claim_window         i64    [226, 234)
    final_day_index      u64    [234, 242)
    total_locked         u128   [242, 258)
    total_weight_accum   u128   [258, 274)
    last_day_index       u64    [274, 282)
    reserve_funded       u8     [282]

The deployed account is 292 bytes; fields past offset 282 are not read.
A different layout gets its own decoder, these offsets never move.
"""

import struct
from dataclasses import dataclass
from typing import Optional

from solders.pubkey import Pubkey

from lockrion_client.core.errors import BufferTooShort, UnsupportedStateVersion

STATE_VERSION_V1 = 1
ISSUANCE_STATE_V1_MIN_SIZE = 283
RESERVE_FUNDED_OFFSET = 282


def _pubkey(data: bytes, offset: int) -> Pubkey:
    return Pubkey.from_bytes(data[offset : offset + 32])


def _u128(data: bytes, offset: int) -> int:
    lo, hi = struct.unpack_from("<QQ", data, offset)
    return lo | (hi << 64)


@dataclass(frozen=True)
class IssuanceState:
    """Snapshot of one issuance-state account (layout v1)."""

    reward_mint: Pubkey
    deposit_escrow: Pubkey
    reward_escrow: Pubkey
    reserve_total: int  # u128
    start_ts: int  # i64
    maturity_ts: int  # i64
    reserve_funded: bool

    version: int  # u8
    bump: int  # u8
    issuer_address: Pubkey
    lock_mint: Pubkey
    platform_treasury: Pubkey
    claim_window: int  # i64
    final_day_index: int  # u64
    total_locked: int  # u128
    total_weight_accum: int  # u128
    last_day_index: int  # u64

    @classmethod
    def from_bytes(cls, data: bytes, address: Optional[str] = None) -> "IssuanceState":
        return decode_issuance_state_v1(data, address=address)


def decode_issuance_state_v1(data: bytes, address: Optional[str] = None) -> IssuanceState:
    """Decode raw account bytes using the v1 offsets.

    Raises BufferTooShort when ``data`` ends before offset 283 and
    UnsupportedStateVersion when the version byte is not 1; extra
    trailing bytes are ignored.
    """
    data = bytes(data)
    if len(data) < ISSUANCE_STATE_V1_MIN_SIZE:
        raise BufferTooShort(
            "IssuanceState v1",
            expected=ISSUANCE_STATE_V1_MIN_SIZE,
            actual=len(data),
            address=address,
        )

    version, bump = struct.unpack_from("<BB", data, 0)
    if version != STATE_VERSION_V1:
        raise UnsupportedStateVersion(
            "IssuanceState v1",
            expected=STATE_VERSION_V1,
            actual=version,
            address=address,
        )
    start_ts, maturity_ts, claim_window = struct.unpack_from("<qqq", data, 210)
    final_day_index = struct.unpack_from("<Q", data, 234)[0]
    last_day_index = struct.unpack_from("<Q", data, 274)[0]

    return IssuanceState(
        reward_mint=_pubkey(data, 66),
        deposit_escrow=_pubkey(data, 98),
        reward_escrow=_pubkey(data, 130),
        reserve_total=_u128(data, 194),
        start_ts=start_ts,
        maturity_ts=maturity_ts,
        reserve_funded=data[RESERVE_FUNDED_OFFSET] != 0,
        version=version,
        bump=bump,
        issuer_address=_pubkey(data, 2),
        lock_mint=_pubkey(data, 34),
        platform_treasury=_pubkey(data, 162),
        claim_window=claim_window,
        final_day_index=final_day_index,
        total_locked=_u128(data, 242),
        total_weight_accum=_u128(data, 258),
        last_day_index=last_day_index,
    )
