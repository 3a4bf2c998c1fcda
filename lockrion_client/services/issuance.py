"""
Lockrion service for interacting with one deployed issuance program.

Derives the program addresses, builds each instruction with its canonical
account list and submits it through a TransactionSubmitter.
"""

import logging
from typing import Optional, Union

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
)
from lockrion_client.blockchain.pda import (
    derive_issuance_address,
    derive_token_account,
    derive_user_address,
)
from lockrion_client.blockchain.state import IssuanceState, decode_issuance_state_v1
from lockrion_client.core.config import settings
from lockrion_client.core.errors import AccountOwnerMismatch, ConfigurationError
from lockrion_client.services.submitter import TransactionSubmitter

logger = logging.getLogger(__name__)


def parse_pubkey(value: Union[str, Pubkey], name: str) -> Pubkey:
    if isinstance(value, Pubkey):
        return value
    if not value or not value.strip():
        raise ConfigurationError(f"{name} not configured")
    try:
        return Pubkey.from_string(value.strip())
    except ValueError as e:
        raise ConfigurationError(f"invalid {name} {value!r}: {e}") from e


class IssuanceService:
    """Service for interacting with the Lockrion program on Solana."""

    def __init__(
        self,
        program_id: Union[str, Pubkey, None] = None,
        submitter: Optional[TransactionSubmitter] = None,
    ):
        self._program_id_value = program_id
        self._program_id: Optional[Pubkey] = None
        self._submitter = submitter

    @property
    def program_id(self) -> Pubkey:
        if self._program_id is None:
            value = self._program_id_value if self._program_id_value is not None else settings.program_id
            self._program_id = parse_pubkey(value, "program_id")
        return self._program_id

    @property
    def submitter(self) -> TransactionSubmitter:
        if self._submitter is None:
            self._submitter = TransactionSubmitter()
        return self._submitter

    # --- PDA derivation ---

    def get_issuance_pda(self, issuer: Pubkey, start_ts: int, reserve_total: int) -> tuple[Pubkey, int]:
        return tuple(derive_issuance_address(self.program_id, issuer, start_ts, reserve_total))

    def get_user_pda(self, issuance: Pubkey, participant: Pubkey) -> tuple[Pubkey, int]:
        return tuple(derive_user_address(self.program_id, issuance, participant))

    def get_token_account(self, owner: Pubkey, mint: Pubkey) -> Pubkey:
        return derive_token_account(owner, mint).address

    # --- On-chain reads ---

    async def get_issuance_state(self, issuance: Pubkey) -> IssuanceState:
        """Read and decode an issuance-state account owned by this program."""
        account = await self.submitter.fetch_account(issuance)
        if account.owner != self.program_id:
            raise AccountOwnerMismatch(str(issuance), str(account.owner), str(self.program_id))
        return decode_issuance_state_v1(account.data, address=str(issuance))

    # --- On-chain writes ---

    async def init_issuance(
        self,
        payer: Keypair,
        reserve_total: int,
        start_ts: int,
        maturity_ts: int,
        lock_mint: Pubkey,
        reward_mint: Pubkey,
        deposit_escrow: Pubkey,
        reward_escrow: Pubkey,
        platform_treasury: Pubkey,
    ) -> tuple[str, Pubkey]:
        """
        Call InitIssuance. The payer is also the issuer the state PDA is keyed on.

        Returns (transaction signature, issuance state address).
        """
        issuance_pda, _ = self.get_issuance_pda(payer.pubkey(), start_ts, reserve_total)
        accounts = InitIssuanceAccounts(
            payer=payer.pubkey(),
            issuance_state=issuance_pda,
            lock_mint=lock_mint,
            reward_mint=reward_mint,
            deposit_escrow=deposit_escrow,
            reward_escrow=reward_escrow,
            platform_treasury=platform_treasury,
        )
        ix = build_instruction(
            self.program_id,
            InitIssuance(reserve_total=reserve_total, start_ts=start_ts, maturity_ts=maturity_ts),
            accounts,
        )
        sig = await self.submitter.submit(ix, [payer])
        logger.info(f"init_issuance confirmed: {sig} issuance={issuance_pda}")
        return sig, issuance_pda

    async def fund_reserve(
        self,
        issuer: Keypair,
        issuance: Pubkey,
        amount: int,
        issuer_reward_account: Optional[Pubkey] = None,
        reward_escrow: Optional[Pubkey] = None,
    ) -> str:
        """
        Call FundReserve. ``amount`` must equal the state's reserve_total.

        Missing accounts are resolved from the on-chain issuance state:
        the reward escrow directly, the issuer's reward account as the
        associated token account for the reward mint.
        """
        if issuer_reward_account is None or reward_escrow is None:
            state = await self.get_issuance_state(issuance)
            if reward_escrow is None:
                reward_escrow = state.reward_escrow
            if issuer_reward_account is None:
                issuer_reward_account = self.get_token_account(issuer.pubkey(), state.reward_mint)

        accounts = FundReserveAccounts(
            issuance_state=issuance,
            issuer=issuer.pubkey(),
            issuer_reward_account=issuer_reward_account,
            reward_escrow=reward_escrow,
        )
        ix = build_instruction(self.program_id, FundReserve(amount=amount), accounts)
        sig = await self.submitter.submit(ix, [issuer])
        logger.info(f"fund_reserve confirmed: {sig} issuance={issuance} amount={amount}")
        return sig

    async def deposit(
        self,
        participant: Keypair,
        issuance: Pubkey,
        amount: int,
        participant_lock_account: Optional[Pubkey] = None,
        deposit_escrow: Optional[Pubkey] = None,
    ) -> str:
        """Call Deposit; the user-state PDA is created by the program on first deposit."""
        if participant_lock_account is None or deposit_escrow is None:
            state = await self.get_issuance_state(issuance)
            if deposit_escrow is None:
                deposit_escrow = state.deposit_escrow
            if participant_lock_account is None:
                participant_lock_account = self.get_token_account(participant.pubkey(), state.lock_mint)

        user_pda, _ = self.get_user_pda(issuance, participant.pubkey())
        accounts = DepositAccounts(
            issuance_state=issuance,
            user_state=user_pda,
            participant=participant.pubkey(),
            participant_lock_account=participant_lock_account,
            deposit_escrow=deposit_escrow,
        )
        ix = build_instruction(self.program_id, Deposit(amount=amount), accounts)
        sig = await self.submitter.submit(ix, [participant])
        logger.info(f"deposit confirmed: {sig} user_state={user_pda} amount={amount}")
        return sig

    async def claim_reward(
        self,
        participant: Keypair,
        issuance: Pubkey,
        participant_reward_account: Optional[Pubkey] = None,
        reward_escrow: Optional[Pubkey] = None,
    ) -> str:
        if participant_reward_account is None or reward_escrow is None:
            state = await self.get_issuance_state(issuance)
            if reward_escrow is None:
                reward_escrow = state.reward_escrow
            if participant_reward_account is None:
                participant_reward_account = self.get_token_account(participant.pubkey(), state.reward_mint)

        user_pda, _ = self.get_user_pda(issuance, participant.pubkey())
        accounts = ClaimRewardAccounts(
            issuance_state=issuance,
            user_state=user_pda,
            participant=participant.pubkey(),
            participant_reward_account=participant_reward_account,
            reward_escrow=reward_escrow,
        )
        ix = build_instruction(self.program_id, ClaimReward(), accounts)
        sig = await self.submitter.submit(ix, [participant])
        logger.info(f"claim_reward confirmed: {sig} user_state={user_pda}")
        return sig


# Singleton instance
issuance_service = IssuanceService()
