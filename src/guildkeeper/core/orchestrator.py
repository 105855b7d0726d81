"""Proposal orchestration — multi-step workflows with pre-flight escrow checks.

Cheap reads always precede mutating calls. The only gap the orchestrator fixes
on its own is the proposer's deposit allowance; it never spends or approves on
behalf of anyone else (the applicant's tribute, a sponsor's deposit).

All other governance actions pass straight through to the dispatcher: the
ledger enforces their safety atomically.
"""

from __future__ import annotations

import logging

from guildkeeper.config import DaoConfig
from guildkeeper.core.dispatcher import (
    LifecycleDispatcher,
    validate_address,
    validate_amount,
)
from guildkeeper.core.escrow import TokenEscrowValidator
from guildkeeper.errors import InsufficientAllowance, InsufficientFunds
from guildkeeper.ledger.gateway import LedgerGateway
from guildkeeper.models.governance import (
    RagequitOutcome,
    SponsorOutcome,
    SubmitOutcome,
    VoteChoice,
)
from guildkeeper.models.ledger import Receipt
from guildkeeper.models.tokens import EscrowSnapshot

logger = logging.getLogger(__name__)


class ProposalOrchestrator:
    """Runs submit and sponsor workflows for an explicitly named identity."""

    def __init__(
        self,
        config: DaoConfig,
        ledger: LedgerGateway,
        escrow: TokenEscrowValidator,
        dispatcher: LifecycleDispatcher,
    ) -> None:
        self.config = config
        self.ledger = ledger
        self.escrow = escrow
        self.dispatcher = dispatcher

    @property
    def spender(self) -> str:
        """The ledger contract is the spender in every escrow relation."""
        return self.config.ledger_address

    def _insufficient_funds(self, snapshot: EscrowSnapshot, amount: int) -> InsufficientFunds:
        logger.warning(
            "preflight_insufficient_funds holder=%s token=%s current=%s required=%s",
            snapshot.holder,
            snapshot.token,
            snapshot.balance,
            amount,
        )
        return InsufficientFunds(snapshot.holder, snapshot.token, snapshot.balance, amount)

    def _insufficient_allowance(
        self, snapshot: EscrowSnapshot, amount: int
    ) -> InsufficientAllowance:
        logger.warning(
            "preflight_insufficient_allowance holder=%s token=%s current=%s required=%s",
            snapshot.holder,
            snapshot.token,
            snapshot.allowance,
            amount,
        )
        return InsufficientAllowance(
            snapshot.holder, snapshot.token, snapshot.spender, snapshot.allowance, amount
        )

    # --- Workflows ---

    async def submit_with_escrow(
        self,
        proposer: str,
        applicant: str,
        shares: int,
        loot: int,
        tribute: int,
        tribute_token: str,
        payment: int,
        payment_token: str,
        details: str,
    ) -> SubmitOutcome:
        """Check custody, top up the proposer's deposit allowance, then submit.

        1. Read the proposal deposit and the deposit token.
        2. Proposer balance below the deposit: InsufficientFunds, nothing sent.
        3. Proposer allowance below the deposit: approve the deposit first.
        4. Tribute offered: the applicant must already hold and have approved
           it, otherwise InsufficientFunds / InsufficientAllowance and the
           proposal is not submitted. The applicant's custody is never touched.
        5. Submit.
        """
        proposer = validate_address(proposer, "proposer")
        applicant = validate_address(applicant, "applicant")
        tribute_token = validate_address(tribute_token, "tribute_token")
        tribute = validate_amount(tribute, "tribute")
        # Reject malformed inputs before the deposit approval can be sent.
        shares = validate_amount(shares, "shares")
        loot = validate_amount(loot, "loot")
        payment = validate_amount(payment, "payment")
        payment_token = validate_address(payment_token, "payment_token")

        deposit = await self.ledger.proposal_deposit()
        deposit_token = await self.ledger.deposit_token()

        held = await self.escrow.snapshot(deposit_token, proposer, self.spender)
        if held.balance < deposit:
            raise self._insufficient_funds(held, deposit)
        if held.allowance < deposit:
            await self.escrow.raise_allowance(deposit_token, proposer, self.spender, deposit)

        if tribute > 0:
            offered = await self.escrow.snapshot(tribute_token, applicant, self.spender)
            if offered.balance < tribute:
                raise self._insufficient_funds(offered, tribute)
            if not offered.covers(tribute):
                raise self._insufficient_allowance(offered, tribute)

        outcome = await self.dispatcher.submit(
            proposer,
            applicant,
            shares,
            loot,
            tribute,
            tribute_token,
            payment,
            payment_token,
            details,
        )
        logger.info("proposal_submitted proposal_id=%s proposer=%s", outcome.proposal_id, proposer)
        return outcome

    async def sponsor_with_allowance_check(
        self, sponsor: str, proposal_id: int
    ) -> SponsorOutcome:
        """Sponsor only if the deposit allowance is already in place.

        The sponsor is usually not the submitter, so the allowance is never
        raised here. InsufficientAllowance reports "current < required".
        """
        sponsor = validate_address(sponsor, "sponsor")
        deposit = await self.ledger.proposal_deposit()
        deposit_token = await self.ledger.deposit_token()
        held = await self.escrow.snapshot(deposit_token, sponsor, self.spender)
        if held.allowance < deposit:
            raise self._insufficient_allowance(held, deposit)
        outcome = await self.dispatcher.sponsor(sponsor, proposal_id)
        logger.info(
            "proposal_sponsored proposal_id=%s queue_index=%s starting_period=%s",
            outcome.proposal_id,
            outcome.queue_index,
            outcome.starting_period,
        )
        return outcome

    # --- Pass-through actions ---

    async def submit_whitelist(self, proposer: str, token: str, details: str) -> SubmitOutcome:
        return await self.dispatcher.submit_whitelist(proposer, token, details)

    async def submit_guild_kick(self, proposer: str, member: str, details: str) -> SubmitOutcome:
        return await self.dispatcher.submit_guild_kick(proposer, member, details)

    async def vote(self, voter: str, proposal_id: int, vote: str | VoteChoice) -> Receipt:
        return await self.dispatcher.vote(voter, proposal_id, vote)

    async def process(self, caller: str, proposal_id: int) -> Receipt:
        return await self.dispatcher.process(caller, proposal_id)

    async def process_whitelist(self, caller: str, proposal_id: int) -> Receipt:
        return await self.dispatcher.process_whitelist(caller, proposal_id)

    async def process_guild_kick(self, caller: str, proposal_id: int) -> Receipt:
        return await self.dispatcher.process_guild_kick(caller, proposal_id)

    async def cancel(self, proposer: str, proposal_id: int) -> Receipt:
        return await self.dispatcher.cancel(proposer, proposal_id)

    async def ragequit(self, member: str, shares: int, loot: int) -> RagequitOutcome:
        return await self.dispatcher.ragequit(member, shares, loot)

    async def ragekick(self, caller: str, member: str) -> RagequitOutcome:
        return await self.dispatcher.ragekick(caller, member)

    async def update_delegate(self, member: str, new_delegate: str) -> Receipt:
        return await self.dispatcher.update_delegate(member, new_delegate)

    async def withdraw(self, member: str, token: str, amount: int) -> Receipt:
        return await self.dispatcher.withdraw(member, token, amount)

    async def collect(self, caller: str, token: str) -> Receipt:
        return await self.dispatcher.collect(caller, token)
