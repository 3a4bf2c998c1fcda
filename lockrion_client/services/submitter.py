"""
Transaction submission for Lockrion instructions.

One call builds a transaction around a single instruction, signs it,
sends it and waits for confirmation. Each call opens its own RPC session
and closes it on every exit path. Nothing is retried here; the caller
decides whether a failure is worth another attempt.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Sequence

from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.core import (
    RPCException,
    TransactionExpiredBlockheightExceededError,
    UnconfirmedTxError,
)
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction

from lockrion_client.core.config import settings
from lockrion_client.core.errors import (
    AccountNotFound,
    ConfigurationError,
    NetworkError,
    ProgramExecutionError,
)

logger = logging.getLogger(__name__)

_TRANSPORT_ERRORS = (SolanaRpcException, OSError)


class CommitmentLevel(str, Enum):
    """Durability requested when confirming a transaction."""
    PROCESSED = "processed"
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"


def commitment_level(value: str) -> CommitmentLevel:
    try:
        return CommitmentLevel(value)
    except ValueError:
        raise ConfigurationError(
            f"invalid commitment {value!r}, expected one of: processed, confirmed, finalized"
        ) from None


@dataclass(frozen=True)
class RawAccount:
    address: Pubkey
    owner: Pubkey
    data: bytes
    lamports: int


def _preflight_logs(exc: RPCException) -> list[str]:
    # SendTransactionPreflightFailureMessage -> RpcSimulateTransactionResult.logs
    payload = exc.args[0] if exc.args else None
    data = getattr(payload, "data", None)
    logs = getattr(data, "logs", None)
    return list(logs) if logs else []


def _rpc_message(exc: RPCException) -> str:
    payload = exc.args[0] if exc.args else None
    return getattr(payload, "message", None) or str(exc)


class TransactionSubmitter:
    """Sign, send and confirm single-instruction transactions."""

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        commitment: Optional[str] = None,
        confirm_timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
        client_factory: Optional[Callable[[], Any]] = None,
    ):
        self._rpc_url = rpc_url or settings.solana_rpc_url
        self._commitment = commitment_level(commitment or settings.commitment)
        self._confirm_timeout = confirm_timeout if confirm_timeout is not None else settings.confirm_timeout_seconds
        self._poll_interval = poll_interval if poll_interval is not None else settings.confirm_poll_seconds
        self._client_factory = client_factory or (lambda: AsyncClient(self._rpc_url, max_transport_retries=0))

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    @property
    def commitment(self) -> CommitmentLevel:
        return self._commitment

    def _check_signers(self, instruction: Instruction, signers: Sequence[Keypair]) -> None:
        if not signers:
            raise ConfigurationError("at least one signer (the fee payer) is required")
        provided = {kp.pubkey() for kp in signers}
        required = {meta.pubkey for meta in instruction.accounts if meta.is_signer}
        missing = required - provided
        if missing:
            raise ConfigurationError(
                f"missing keypairs for signer accounts: {sorted(str(pk) for pk in missing)}"
            )
        extra = provided - required - {signers[0].pubkey()}
        if extra:
            raise ConfigurationError(
                f"keypairs not required by the instruction: {sorted(str(pk) for pk in extra)}"
            )

    async def submit(
        self,
        instruction: Instruction,
        signers: Sequence[Keypair],
        commitment: Optional[str] = None,
    ) -> str:
        """
        Send ``instruction`` signed by ``signers`` and wait for confirmation.

        The first signer pays the fee. Returns the transaction signature.
        Raises ConfigurationError before any network call when the signer set
        does not match the instruction, NetworkError on transport failures and
        timeouts, and ProgramExecutionError when the program rejects the
        transaction.
        """
        self._check_signers(instruction, signers)
        level = commitment_level(commitment) if commitment else self._commitment
        payer = signers[0]

        async with self._client_factory() as client:
            try:
                blockhash_resp = await client.get_latest_blockhash(level.value)
            except (RPCException, *_TRANSPORT_ERRORS) as e:
                raise NetworkError(f"failed to fetch blockhash: {e}", rpc_url=self._rpc_url) from e
            recent_blockhash = blockhash_resp.value.blockhash
            last_valid_block_height = blockhash_resp.value.last_valid_block_height

            msg = Message.new_with_blockhash([instruction], payer.pubkey(), recent_blockhash)
            tx = Transaction.new_unsigned(msg)
            tx.sign(list(signers), recent_blockhash)

            try:
                resp = await client.send_transaction(tx)
            except RPCException as e:
                logs = _preflight_logs(e)
                logger.error(f"transaction rejected in preflight: {_rpc_message(e)}")
                raise ProgramExecutionError(_rpc_message(e), logs=logs) from e
            except _TRANSPORT_ERRORS as e:
                raise NetworkError(f"failed to send transaction: {e}", rpc_url=self._rpc_url) from e

            signature = resp.value
            sig = str(signature)
            logger.info(f"tx sent: {sig}")

            await self._confirm(client, signature, level, last_valid_block_height)
            logger.info(f"tx confirmed ({level.value}): {sig}")
            return sig

    async def _confirm(
        self,
        client: Any,
        signature: Signature,
        level: CommitmentLevel,
        last_valid_block_height: int,
    ) -> None:
        sig = str(signature)
        try:
            status_resp = await asyncio.wait_for(
                client.confirm_transaction(
                    signature,
                    level.value,
                    sleep_seconds=self._poll_interval,
                    last_valid_block_height=last_valid_block_height,
                ),
                timeout=self._confirm_timeout,
            )
        except (asyncio.TimeoutError, UnconfirmedTxError, TransactionExpiredBlockheightExceededError) as e:
            raise NetworkError(
                f"transaction {sig} not confirmed at {level.value}: {str(e) or 'timeout'}",
                rpc_url=self._rpc_url,
                signature=sig,
            ) from e
        except (RPCException, *_TRANSPORT_ERRORS) as e:
            raise NetworkError(
                f"confirmation of {sig} failed: {e}", rpc_url=self._rpc_url, signature=sig
            ) from e

        statuses = status_resp.value
        status = statuses[0] if statuses else None
        if status is None or status.err is None:
            return

        logs = await self._fetch_logs(client, signature, level)
        logger.error(f"tx {sig} failed on-chain: {status.err}")
        raise ProgramExecutionError(
            f"transaction {sig} failed: {status.err}", logs=logs, signature=sig
        )

    async def _fetch_logs(self, client: Any, signature: Signature, level: CommitmentLevel) -> list[str]:
        # get_transaction does not accept "processed"
        lookup = CommitmentLevel.CONFIRMED if level is CommitmentLevel.PROCESSED else level
        try:
            resp = await client.get_transaction(
                signature, commitment=lookup.value, max_supported_transaction_version=0
            )
        except (RPCException, *_TRANSPORT_ERRORS) as e:
            logger.warning(f"could not fetch logs for {signature}: {e}")
            return []
        tx = resp.value
        meta = tx.transaction.meta if tx is not None else None
        if meta is None or meta.log_messages is None:
            logger.warning(f"no logs recorded for {signature}")
            return []
        return list(meta.log_messages)

    async def fetch_account(self, address: Pubkey, commitment: Optional[str] = None) -> RawAccount:
        """Fetch raw account bytes and owner; AccountNotFound when empty."""
        level = commitment_level(commitment) if commitment else self._commitment
        async with self._client_factory() as client:
            try:
                resp = await client.get_account_info(address, level.value)
            except (RPCException, *_TRANSPORT_ERRORS) as e:
                raise NetworkError(
                    f"failed to fetch account {address}: {e}",
                    rpc_url=self._rpc_url,
                    address=str(address),
                ) from e
        if resp.value is None:
            raise AccountNotFound(str(address))
        return RawAccount(
            address=address,
            owner=resp.value.owner,
            data=bytes(resp.value.data),
            lamports=resp.value.lamports,
        )
