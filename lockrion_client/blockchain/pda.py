"""
Program-derived address (PDA) derivation.

A PDA is the first SHA-256 digest of
``seeds || bump || program_id || "ProgramDerivedAddress"`` that is not a
valid ed25519 point, searching bump from 255 down to 0. No private key
exists for such an address.
"""

import hashlib
import struct
from dataclasses import dataclass
from typing import Optional, Sequence

from solders.pubkey import Pubkey

from lockrion_client.core.constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    I64_MAX,
    I64_MIN,
    ISSUANCE_SEED,
    MAX_SEED_LEN,
    MAX_SEEDS,
    PDA_MARKER,
    TOKEN_PROGRAM_ID,
    U128_MAX,
    USER_SEED,
)
from lockrion_client.core.errors import ConfigurationError, DerivationExhausted, EncodingError


@dataclass(frozen=True)
class DerivedAddress:
    address: Pubkey
    bump: int

    def __iter__(self):
        # Unpacks like Pubkey.find_program_address: `pda, bump = ...`
        yield self.address
        yield self.bump


def _check_seeds(seeds: Sequence[bytes]) -> list[bytes]:
    if len(seeds) > MAX_SEEDS - 1:
        raise ConfigurationError(
            f"too many seeds: {len(seeds)} (max {MAX_SEEDS - 1} plus bump)"
        )
    checked = []
    for index, seed in enumerate(seeds):
        seed = bytes(seed)
        if len(seed) > MAX_SEED_LEN:
            raise ConfigurationError(
                f"seed {index} is {len(seed)} bytes (max {MAX_SEED_LEN})"
            )
        checked.append(seed)
    return checked


def find_derived_address(seeds: Sequence[bytes], program_id: Pubkey) -> Optional[DerivedAddress]:
    """Search bumps 255..0; return the first off-curve address or None."""
    prefix = b"".join(_check_seeds(seeds))
    suffix = bytes(program_id) + PDA_MARKER
    for bump in range(255, -1, -1):
        digest = hashlib.sha256(prefix + bytes([bump]) + suffix).digest()
        candidate = Pubkey.from_bytes(digest)
        if not candidate.is_on_curve():
            return DerivedAddress(candidate, bump)
    return None


def derive_address(seeds: Sequence[bytes], program_id: Pubkey) -> DerivedAddress:
    derived = find_derived_address(seeds, program_id)
    if derived is None:
        raise DerivationExhausted(seeds, str(program_id))
    return derived


# --- Seed recipes ---

def encode_i64(value: int, field: str = "i64") -> bytes:
    if isinstance(value, bool) or not isinstance(value, int) or not I64_MIN <= value <= I64_MAX:
        raise EncodingError(f"{field}={value} does not fit in i64")
    return struct.pack("<q", value)


def encode_u128(value: int, field: str = "u128") -> bytes:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= U128_MAX:
        raise EncodingError(f"{field}={value} does not fit in u128")
    # Two little-endian u64 halves, low half first
    return struct.pack("<QQ", value & 0xFFFFFFFFFFFFFFFF, value >> 64)


def issuance_seeds(issuer: Pubkey, start_ts: int, reserve_total: int) -> list[bytes]:
    return [
        ISSUANCE_SEED,
        bytes(issuer),
        encode_i64(start_ts, "start_ts"),
        encode_u128(reserve_total, "reserve_total"),
    ]


def derive_issuance_address(
    program_id: Pubkey,
    issuer: Pubkey,
    start_ts: int,
    reserve_total: int,
) -> DerivedAddress:
    return derive_address(issuance_seeds(issuer, start_ts, reserve_total), program_id)


def derive_user_address(program_id: Pubkey, issuance: Pubkey, participant: Pubkey) -> DerivedAddress:
    return derive_address([USER_SEED, bytes(issuance), bytes(participant)], program_id)


def derive_token_account(
    owner: Pubkey,
    mint: Pubkey,
    token_program: Pubkey = TOKEN_PROGRAM_ID,
) -> DerivedAddress:
    """Associated token account of ``owner`` for ``mint``."""
    return derive_address(
        [bytes(owner), bytes(token_program), bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )
