"""
Error types raised by the Lockrion client.

Every error carries the structured context needed to reproduce it
(addresses, variant, offsets, lengths, program logs) as attributes,
in addition to a readable message.
"""

import re
from typing import Optional, Sequence

# Custom error codes of the on-chain program (ProgramError::Custom(n))
PROGRAM_ERROR_CODES = {
    0: "InvalidInstruction",
    10: "ReserveAlreadyFunded",
    11: "ReserveNotFunded",
    12: "InvalidFundingAmount",
    13: "FundingWindowClosed",
    20: "DepositWindowNotStarted",
    21: "DepositWindowClosed",
    22: "DepositWindowNotClosed",
    23: "InvalidAmount",
    30: "ClaimWindowNotStarted",
    31: "ClaimWindowClosed",
    32: "AlreadyClaimed",
    40: "SweepAlreadyExecuted",
    41: "ReclaimAlreadyExecuted",
    42: "NoParticipation",
    50: "UnauthorizedCaller",
    51: "InvalidPda",
    52: "InvalidTokenProgram",
    53: "InvalidMint",
    54: "InvalidAuthority",
    55: "InvalidEscrowAccount",
    56: "InvalidPlatformTreasury",
    57: "InvalidUserStateAccount",
    60: "ArithmeticOverflow",
    61: "ArithmeticUnderflow",
    62: "DivisionByZero",
    63: "InvariantViolation",
    70: "InvalidStateVersion",
    71: "InvalidAccountSize",
}

_CUSTOM_ERROR_RE = re.compile(r"custom program error: 0x([0-9a-fA-F]+)")


class LockrionClientError(Exception):
    """Base class for all client errors."""


class ConfigurationError(LockrionClientError):
    """A required input is missing or malformed. Raised before any network call."""


class DerivationExhausted(LockrionClientError):
    """No off-curve address exists for the seeds within bumps 255..0."""

    def __init__(self, seeds: Sequence[bytes], program_id: str):
        self.seeds = [bytes(s) for s in seeds]
        self.program_id = program_id
        super().__init__(
            f"no off-curve address for seeds={[s.hex() for s in self.seeds]} "
            f"program_id={program_id}"
        )


class EncodingError(LockrionClientError):
    """A field or payload does not fit the fixed wire layout."""

    def __init__(self, message: str, variant: Optional[str] = None):
        self.variant = variant
        super().__init__(message)


class InvalidInstructionData(EncodingError):
    """Instruction bytes with an unknown discriminant or the wrong length."""

    def __init__(
        self,
        message: str,
        discriminant: Optional[int] = None,
        expected_len: Optional[int] = None,
        actual_len: int = 0,
        variant: Optional[str] = None,
    ):
        self.discriminant = discriminant
        self.expected_len = expected_len
        self.actual_len = actual_len
        super().__init__(message, variant=variant)


class BufferTooShort(LockrionClientError):
    """Account bytes end before the fixed layout does."""

    def __init__(self, layout: str, expected: int, actual: int, address: Optional[str] = None):
        self.layout = layout
        self.expected = expected
        self.actual = actual
        self.address = address
        where = f" at {address}" if address else ""
        super().__init__(
            f"{layout} needs at least {expected} bytes, got {actual}{where}"
        )


class UnsupportedStateVersion(LockrionClientError):
    """Account bytes carry a layout version this decoder does not read."""

    def __init__(self, layout: str, expected: int, actual: int, address: Optional[str] = None):
        self.layout = layout
        self.expected = expected
        self.actual = actual
        self.address = address
        where = f" at {address}" if address else ""
        super().__init__(
            f"{layout} expects version {expected}, got {actual}{where}"
        )


class NetworkError(LockrionClientError):
    """RPC endpoint unreachable, returned an error response, or a request/confirmation timed out."""

    def __init__(
        self,
        message: str,
        rpc_url: Optional[str] = None,
        signature: Optional[str] = None,
        address: Optional[str] = None,
    ):
        self.rpc_url = rpc_url
        self.signature = signature
        self.address = address
        super().__init__(message)


class AccountNotFound(LockrionClientError):
    """The queried address holds no account."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"account not found: {address}")


class AccountOwnerMismatch(LockrionClientError):
    """The account exists but is owned by another program."""

    def __init__(self, address: str, owner: str, expected_owner: str):
        self.address = address
        self.owner = owner
        self.expected_owner = expected_owner
        super().__init__(
            f"account {address} is owned by {owner}, expected {expected_owner}"
        )


class ProgramExecutionError(LockrionClientError):
    """The program rejected the transaction.

    ``logs`` holds the program's execution log lines when they could be
    retrieved and is empty otherwise. ``error_code``/``error_name`` are
    filled from a ``custom program error`` log line when one is present.
    """

    def __init__(
        self,
        message: str,
        logs: Optional[Sequence[str]] = None,
        signature: Optional[str] = None,
    ):
        self.logs = list(logs or [])
        self.signature = signature
        self.error_code = parse_custom_error_code(self.logs)
        self.error_name = PROGRAM_ERROR_CODES.get(self.error_code) if self.error_code is not None else None
        if self.error_name:
            message = f"{message} ({self.error_name})"
        super().__init__(message)


def parse_custom_error_code(logs: Sequence[str]) -> Optional[int]:
    """Return the last custom program error code found in ``logs``."""
    code = None
    for line in logs:
        match = _CUSTOM_ERROR_RE.search(line)
        if match:
            code = int(match.group(1), 16)
    return code
