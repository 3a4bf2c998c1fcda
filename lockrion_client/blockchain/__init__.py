from lockrion_client.blockchain.pda import (
    DerivedAddress,
    derive_address,
    derive_issuance_address,
    derive_token_account,
    derive_user_address,
    find_derived_address,
)
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
from lockrion_client.blockchain.state import IssuanceState, decode_issuance_state_v1

__all__ = [
    "DerivedAddress",
    "derive_address",
    "derive_issuance_address",
    "derive_token_account",
    "derive_user_address",
    "find_derived_address",
    "ClaimReward",
    "ClaimRewardAccounts",
    "Deposit",
    "DepositAccounts",
    "FundReserve",
    "FundReserveAccounts",
    "InitIssuance",
    "InitIssuanceAccounts",
    "build_instruction",
    "decode_instruction",
    "encode_instruction",
    "IssuanceState",
    "decode_issuance_state_v1",
]
