"""
Instruction payloads and account lists for the Lockrion program.

Payload format: 1-byte discriminant followed by fixed-width little-endian
fields, no padding:

- InitIssuance (0): reserve_total u128, start_ts i64, maturity_ts i64 (33 bytes)
- FundReserve  (1): amount u64 (9 bytes)
- Deposit      (2): amount u64 (9 bytes)
- ClaimReward  (3): no fields (1 byte)

The program reads its accounts positionally, so each variant has its own
account-list type whose field order is the wire order.
"""

import struct
from dataclasses import dataclass, fields
from typing import Union

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from lockrion_client.core.constants import SYSTEM_PROGRAM_ID, TOKEN_PROGRAM_ID, U64_MAX
from lockrion_client.core.errors import ConfigurationError, EncodingError, InvalidInstructionData
from lockrion_client.blockchain.pda import encode_i64, encode_u128

INIT_ISSUANCE = 0
FUND_RESERVE = 1
DEPOSIT = 2
CLAIM_REWARD = 3


# --- Payloads ---

@dataclass(frozen=True)
class InitIssuance:
    reserve_total: int  # u128
    start_ts: int  # i64
    maturity_ts: int  # i64

    DISCRIMINANT = INIT_ISSUANCE
    SIZE = 33


@dataclass(frozen=True)
class FundReserve:
    amount: int  # u64

    DISCRIMINANT = FUND_RESERVE
    SIZE = 9


@dataclass(frozen=True)
class Deposit:
    amount: int  # u64

    DISCRIMINANT = DEPOSIT
    SIZE = 9


@dataclass(frozen=True)
class ClaimReward:
    DISCRIMINANT = CLAIM_REWARD
    SIZE = 1


LockrionInstruction = Union[InitIssuance, FundReserve, Deposit, ClaimReward]

VARIANTS = {
    INIT_ISSUANCE: InitIssuance,
    FUND_RESERVE: FundReserve,
    DEPOSIT: Deposit,
    CLAIM_REWARD: ClaimReward,
}


def _encode_u64(value: int, field: str, variant: str) -> bytes:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= U64_MAX:
        raise EncodingError(f"{variant}.{field}={value} does not fit in u64", variant=variant)
    return struct.pack("<Q", value)


def encode_instruction(ix: LockrionInstruction) -> bytes:
    """Serialize an instruction payload to its exact wire bytes."""
    variant = type(ix).__name__
    if isinstance(ix, InitIssuance):
        try:
            body = (
                encode_u128(ix.reserve_total, "InitIssuance.reserve_total")
                + encode_i64(ix.start_ts, "InitIssuance.start_ts")
                + encode_i64(ix.maturity_ts, "InitIssuance.maturity_ts")
            )
        except EncodingError as e:
            raise EncodingError(str(e), variant=variant) from e
    elif isinstance(ix, (FundReserve, Deposit)):
        body = _encode_u64(ix.amount, "amount", variant)
    elif isinstance(ix, ClaimReward):
        body = b""
    else:
        raise EncodingError(f"unsupported instruction type: {variant}")

    data = bytes([ix.DISCRIMINANT]) + body
    if len(data) != ix.SIZE:
        raise EncodingError(f"{variant} encoded to {len(data)} bytes, expected {ix.SIZE}", variant=variant)
    return data


def decode_instruction(data: bytes) -> LockrionInstruction:
    """Parse wire bytes back into an instruction payload."""
    data = bytes(data)
    if not data:
        raise InvalidInstructionData("empty instruction data", actual_len=0)

    discriminant = data[0]
    cls = VARIANTS.get(discriminant)
    if cls is None:
        raise InvalidInstructionData(
            f"unknown discriminant {discriminant} (expected 0..3)",
            discriminant=discriminant,
            actual_len=len(data),
        )
    if len(data) != cls.SIZE:
        raise InvalidInstructionData(
            f"{cls.__name__} expects {cls.SIZE} bytes, got {len(data)}",
            discriminant=discriminant,
            expected_len=cls.SIZE,
            actual_len=len(data),
            variant=cls.__name__,
        )

    if cls is InitIssuance:
        lo, hi, start_ts, maturity_ts = struct.unpack_from("<QQqq", data, 1)
        return InitIssuance(
            reserve_total=lo | (hi << 64),
            start_ts=start_ts,
            maturity_ts=maturity_ts,
        )
    if cls is ClaimReward:
        return ClaimReward()
    amount = struct.unpack_from("<Q", data, 1)[0]
    return cls(amount=amount)


# --- Account lists (field order is the wire order) ---

def _meta(pubkey: Pubkey, signer: bool = False, writable: bool = False) -> AccountMeta:
    return AccountMeta(pubkey=pubkey, is_signer=signer, is_writable=writable)


@dataclass(frozen=True)
class InitIssuanceAccounts:
    payer: Pubkey
    issuance_state: Pubkey
    lock_mint: Pubkey
    reward_mint: Pubkey
    deposit_escrow: Pubkey
    reward_escrow: Pubkey
    platform_treasury: Pubkey
    system_program: Pubkey = SYSTEM_PROGRAM_ID

    def to_account_metas(self) -> list[AccountMeta]:
        return [
            _meta(self.payer, signer=True, writable=True),
            _meta(self.issuance_state, writable=True),
            _meta(self.lock_mint),
            _meta(self.reward_mint),
            _meta(self.deposit_escrow),
            _meta(self.reward_escrow),
            _meta(self.platform_treasury),
            _meta(self.system_program),
        ]


@dataclass(frozen=True)
class FundReserveAccounts:
    issuance_state: Pubkey
    issuer: Pubkey
    issuer_reward_account: Pubkey
    reward_escrow: Pubkey
    token_program: Pubkey = TOKEN_PROGRAM_ID

    def to_account_metas(self) -> list[AccountMeta]:
        return [
            _meta(self.issuance_state, writable=True),
            _meta(self.issuer, signer=True),
            _meta(self.issuer_reward_account, writable=True),
            _meta(self.reward_escrow, writable=True),
            _meta(self.token_program),
        ]


@dataclass(frozen=True)
class DepositAccounts:
    issuance_state: Pubkey
    user_state: Pubkey
    participant: Pubkey
    participant_lock_account: Pubkey
    deposit_escrow: Pubkey
    token_program: Pubkey = TOKEN_PROGRAM_ID
    system_program: Pubkey = SYSTEM_PROGRAM_ID

    def to_account_metas(self) -> list[AccountMeta]:
        return [
            _meta(self.issuance_state, writable=True),
            _meta(self.user_state, writable=True),
            _meta(self.participant, signer=True),
            _meta(self.participant_lock_account, writable=True),
            _meta(self.deposit_escrow, writable=True),
            _meta(self.token_program),
            _meta(self.system_program),
        ]


@dataclass(frozen=True)
class ClaimRewardAccounts:
    issuance_state: Pubkey
    user_state: Pubkey
    participant: Pubkey
    participant_reward_account: Pubkey
    reward_escrow: Pubkey
    token_program: Pubkey = TOKEN_PROGRAM_ID

    def to_account_metas(self) -> list[AccountMeta]:
        return [
            _meta(self.issuance_state, writable=True),
            _meta(self.user_state, writable=True),
            _meta(self.participant, signer=True),
            _meta(self.participant_reward_account, writable=True),
            _meta(self.reward_escrow, writable=True),
            _meta(self.token_program),
        ]


AccountList = Union[InitIssuanceAccounts, FundReserveAccounts, DepositAccounts, ClaimRewardAccounts]

ACCOUNT_LISTS = {
    InitIssuance: InitIssuanceAccounts,
    FundReserve: FundReserveAccounts,
    Deposit: DepositAccounts,
    ClaimReward: ClaimRewardAccounts,
}


def build_instruction(program_id: Pubkey, ix: LockrionInstruction, accounts: AccountList) -> Instruction:
    """Pair a payload with the account list its variant requires."""
    expected = ACCOUNT_LISTS.get(type(ix))
    if expected is None or not isinstance(accounts, expected):
        raise ConfigurationError(
            f"{type(ix).__name__} requires {expected.__name__ if expected else 'a known variant'}, "
            f"got {type(accounts).__name__}"
        )
    for field in fields(accounts):
        if not isinstance(getattr(accounts, field.name), Pubkey):
            raise ConfigurationError(
                f"{type(accounts).__name__}.{field.name} must be a Pubkey"
            )
    return Instruction(program_id, encode_instruction(ix), accounts.to_account_metas())
