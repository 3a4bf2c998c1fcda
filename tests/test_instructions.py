import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from lockrion_client.blockchain.instructions import (
    ClaimReward,
    ClaimRewardAccounts,
    Deposit,
    DepositAccounts,
    FundReserve,
    FundReserveAccounts,
    InitIssuance,
    InitIssuanceAccounts,
    build_instruction,
    decode_instruction,
    encode_instruction,
)
from lockrion_client.core.constants import SYSTEM_PROGRAM_ID, TOKEN_PROGRAM_ID
from lockrion_client.core.errors import ConfigurationError, EncodingError, InvalidInstructionData

from tests.conftest import PROGRAM_ID


def _keys(n):
    return [Keypair().pubkey() for _ in range(n)]


def test_fund_encoding():
    assert encode_instruction(FundReserve(amount=500)) == bytes(
        [0x01, 0xF4, 0x01, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00]
    )


def test_claim_encoding():
    assert encode_instruction(ClaimReward()) == bytes([0x03])


def test_deposit_encoding():
    assert encode_instruction(Deposit(amount=2**64 - 1)) == b"\x02" + b"\xff" * 8


def test_init_encoding_splits_u128_into_le_halves():
    data = encode_instruction(InitIssuance(reserve_total=2**64 + 5, start_ts=-1, maturity_ts=100))
    assert len(data) == 33
    assert data[0] == 0
    assert data[1:9] == (5).to_bytes(8, "little")
    assert data[9:17] == (1).to_bytes(8, "little")
    assert data[17:25] == b"\xff" * 8
    assert data[25:33] == (100).to_bytes(8, "little")


@pytest.mark.parametrize(
    "ix, size",
    [
        (InitIssuance(reserve_total=2**128 - 1, start_ts=-(2**63), maturity_ts=2**63 - 1), 33),
        (FundReserve(amount=0), 9),
        (Deposit(amount=123_456), 9),
        (ClaimReward(), 1),
    ],
)
def test_round_trip_and_width(ix, size):
    data = encode_instruction(ix)
    assert len(data) == size
    assert decode_instruction(data) == ix


@pytest.mark.parametrize(
    "ix",
    [
        FundReserve(amount=-1),
        Deposit(amount=2**64),
        InitIssuance(reserve_total=2**128, start_ts=0, maturity_ts=0),
        InitIssuance(reserve_total=1, start_ts=2**63, maturity_ts=0),
        FundReserve(amount=1.5),
        FundReserve(amount=True),
        InitIssuance(reserve_total=True, start_ts=0, maturity_ts=0),
        InitIssuance(reserve_total=1, start_ts=False, maturity_ts=0),
    ],
)
def test_encode_rejects_out_of_range(ix):
    with pytest.raises(EncodingError) as exc_info:
        encode_instruction(ix)
    assert exc_info.value.variant == type(ix).__name__


class _MisSizedFund(FundReserve):
    SIZE = 10


def test_encode_checks_declared_width():
    with pytest.raises(EncodingError) as exc_info:
        encode_instruction(_MisSizedFund(amount=1))
    assert exc_info.value.variant == "_MisSizedFund"


def test_decode_rejects_unknown_discriminant():
    with pytest.raises(InvalidInstructionData) as exc_info:
        decode_instruction(bytes([4]))
    assert exc_info.value.discriminant == 4


def test_decode_rejects_empty():
    with pytest.raises(InvalidInstructionData):
        decode_instruction(b"")


@pytest.mark.parametrize("data", [b"\x01" + bytes(7), b"\x02" + bytes(9), b"\x03\x00", b"\x00" + bytes(31)])
def test_decode_rejects_length_mismatch(data):
    with pytest.raises(InvalidInstructionData) as exc_info:
        decode_instruction(data)
    assert exc_info.value.discriminant == data[0]
    assert exc_info.value.actual_len == len(data)
    assert exc_info.value.expected_len != len(data)


def _flags(metas):
    return [(m.pubkey, m.is_signer, m.is_writable) for m in metas]


def test_init_account_order():
    payer, state, lock, reward, dep_esc, rew_esc, treasury = _keys(7)
    metas = InitIssuanceAccounts(payer, state, lock, reward, dep_esc, rew_esc, treasury).to_account_metas()
    assert _flags(metas) == [
        (payer, True, True),
        (state, False, True),
        (lock, False, False),
        (reward, False, False),
        (dep_esc, False, False),
        (rew_esc, False, False),
        (treasury, False, False),
        (SYSTEM_PROGRAM_ID, False, False),
    ]


def test_fund_account_order():
    state, issuer, issuer_ata, escrow = _keys(4)
    metas = FundReserveAccounts(state, issuer, issuer_ata, escrow).to_account_metas()
    assert _flags(metas) == [
        (state, False, True),
        (issuer, True, False),
        (issuer_ata, False, True),
        (escrow, False, True),
        (TOKEN_PROGRAM_ID, False, False),
    ]


def test_deposit_account_order():
    state, user, participant, lock_ata, escrow = _keys(5)
    metas = DepositAccounts(state, user, participant, lock_ata, escrow).to_account_metas()
    assert _flags(metas) == [
        (state, False, True),
        (user, False, True),
        (participant, True, False),
        (lock_ata, False, True),
        (escrow, False, True),
        (TOKEN_PROGRAM_ID, False, False),
        (SYSTEM_PROGRAM_ID, False, False),
    ]


def test_claim_account_order():
    state, user, participant, reward_ata, escrow = _keys(5)
    metas = ClaimRewardAccounts(state, user, participant, reward_ata, escrow).to_account_metas()
    assert _flags(metas) == [
        (state, False, True),
        (user, False, True),
        (participant, True, False),
        (reward_ata, False, True),
        (escrow, False, True),
        (TOKEN_PROGRAM_ID, False, False),
    ]


def test_build_instruction():
    accounts = FundReserveAccounts(*_keys(4))
    ix = build_instruction(PROGRAM_ID, FundReserve(amount=500), accounts)
    assert ix.program_id == PROGRAM_ID
    assert bytes(ix.data) == encode_instruction(FundReserve(amount=500))
    assert list(ix.accounts) == accounts.to_account_metas()


def test_build_instruction_rejects_mismatched_accounts():
    with pytest.raises(ConfigurationError):
        build_instruction(PROGRAM_ID, ClaimReward(), FundReserveAccounts(*_keys(4)))


def test_build_instruction_rejects_non_pubkey_fields():
    state, issuer, issuer_ata, _ = _keys(4)
    accounts = FundReserveAccounts(state, issuer, issuer_ata, "not-a-pubkey")
    with pytest.raises(ConfigurationError):
        build_instruction(PROGRAM_ID, FundReserve(amount=1), accounts)
