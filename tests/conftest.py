import asyncio
import struct
from types import SimpleNamespace
from typing import Optional

import pytest
from solana.exceptions import SolanaRpcException
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

PROGRAM_ID = Pubkey.from_string("B9xmmg2zPMSwPg7iX7a9J2j6SK5LcopZ8abRDj9ughxw")


def transport_error(message: str = "connection refused") -> SolanaRpcException:
    """The wrapped error AsyncClient raises when the HTTP layer fails."""
    return SolanaRpcException(ConnectionError(message), transport_error, None, None)


def make_issuance_account(
    reward_mint: Pubkey,
    deposit_escrow: Pubkey,
    reward_escrow: Pubkey,
    reserve_total: int = 1_000,
    start_ts: int = 1_700_000_000,
    maturity_ts: int = 1_700_086_400,
    reserve_funded: int = 0,
    lock_mint: Optional[Pubkey] = None,
    issuer: Optional[Pubkey] = None,
    size: int = 292,
) -> bytes:
    data = bytearray(size)
    data[0] = 1
    data[1] = 254
    data[2:34] = bytes(issuer or Pubkey.default())
    data[34:66] = bytes(lock_mint or Pubkey.default())
    data[66:98] = bytes(reward_mint)
    data[98:130] = bytes(deposit_escrow)
    data[130:162] = bytes(reward_escrow)
    data[194:210] = struct.pack("<QQ", reserve_total & (2**64 - 1), reserve_total >> 64)
    data[210:218] = struct.pack("<q", start_ts)
    data[218:226] = struct.pack("<q", maturity_ts)
    data[282] = reserve_funded
    return bytes(data)


class FakeClient:
    """In-memory stand-in for solana.rpc.async_api.AsyncClient."""

    def __init__(self):
        self.signature = Signature.default()
        self.sent = []
        self.closed = False
        self.entered = 0
        self.blockhash_error: Optional[Exception] = None
        self.send_error: Optional[Exception] = None
        self.confirm_error: Optional[Exception] = None
        self.confirm_delay = 0.0
        self.status_err = None
        self.log_messages: Optional[list[str]] = None
        self.get_transaction_error: Optional[Exception] = None
        self.accounts: dict = {}
        self.account_error: Optional[Exception] = None
        self.confirm_calls = []

    async def __aenter__(self):
        self.entered += 1
        return self

    async def __aexit__(self, *exc_info):
        self.closed = True

    async def get_latest_blockhash(self, commitment=None):
        if self.blockhash_error:
            raise self.blockhash_error
        return SimpleNamespace(
            value=SimpleNamespace(blockhash=Hash.default(), last_valid_block_height=100)
        )

    async def send_transaction(self, tx):
        if self.send_error:
            raise self.send_error
        self.sent.append(tx)
        return SimpleNamespace(value=self.signature)

    async def confirm_transaction(self, signature, commitment=None, sleep_seconds=0.5, last_valid_block_height=None):
        self.confirm_calls.append((signature, commitment, last_valid_block_height))
        if self.confirm_delay:
            await asyncio.sleep(self.confirm_delay)
        if self.confirm_error:
            raise self.confirm_error
        return SimpleNamespace(value=[SimpleNamespace(err=self.status_err)])

    async def get_transaction(self, signature, commitment=None, max_supported_transaction_version=None):
        if self.get_transaction_error:
            raise self.get_transaction_error
        if self.log_messages is None:
            return SimpleNamespace(value=None)
        meta = SimpleNamespace(log_messages=self.log_messages)
        return SimpleNamespace(value=SimpleNamespace(transaction=SimpleNamespace(meta=meta)))

    async def get_account_info(self, address, commitment=None):
        if self.account_error:
            raise self.account_error
        account = self.accounts.get(address)
        return SimpleNamespace(value=account)


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def payer() -> Keypair:
    return Keypair()
