from typing import Final

from solders.pubkey import Pubkey

# Well-known programs
SYSTEM_PROGRAM_ID: Final[Pubkey] = Pubkey.from_string("11111111111111111111111111111111")
TOKEN_PROGRAM_ID: Final[Pubkey] = Pubkey.from_string(
    "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
)
ASSOCIATED_TOKEN_PROGRAM_ID: Final[Pubkey] = Pubkey.from_string(
    "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
)

# PDA derivation (must match the runtime)
PDA_MARKER: Final[bytes] = b"ProgramDerivedAddress"
MAX_SEED_LEN: Final[int] = 32
MAX_SEEDS: Final[int] = 16  # includes the bump seed

# PDA Seeds (must match the on-chain program)
ISSUANCE_SEED: Final[bytes] = b"issuance"
USER_SEED: Final[bytes] = b"user"

# Integer bounds for wire fields
U64_MAX: Final[int] = 2**64 - 1
U128_MAX: Final[int] = 2**128 - 1
I64_MIN: Final[int] = -(2**63)
I64_MAX: Final[int] = 2**63 - 1
