"""Lifecycle command dispatch — one ledger call per governance action.

Inputs are validated at this boundary (addresses, bounded integers, vote
values) before anything is sent. Each action awaits confirmation and decodes
its receipt into a structured outcome. Reverts propagate as LedgerRejection
with the ledger's reason untouched; nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Any

import pydantic
from pydantic import TypeAdapter

from guildkeeper.errors import InvalidVote, UnexpectedReceipt, ValidationError
from guildkeeper.ledger.gateway import LedgerGateway
from guildkeeper.models.governance import (
    RagequitOutcome,
    SponsorOutcome,
    SubmitOutcome,
    VoteChoice,
)
from guildkeeper.models.ledger import Address, LedgerEvent, Receipt, Uint256

logger = logging.getLogger(__name__)

_ADDRESS = TypeAdapter(Address)
_UINT256 = TypeAdapter(Uint256)

_VOTE_WORDS: dict[str, VoteChoice] = {"yes": VoteChoice.YES, "no": VoteChoice.NO}


# --- Boundary validation ---


def parse_vote(raw: str | VoteChoice) -> VoteChoice:
    """Map operator text to a ballot value. Case-insensitive; only yes/no."""
    if isinstance(raw, VoteChoice):
        return raw
    choice = _VOTE_WORDS.get(str(raw).strip().lower())
    if choice is None:
        raise InvalidVote(str(raw))
    return choice


def validate_address(value: str, name: str) -> str:
    try:
        return _ADDRESS.validate_python(value)
    except pydantic.ValidationError as exc:
        msg = f"{name} must be a 0x-prefixed 20-byte address, got {value!r}"
        raise ValidationError(msg) from exc


def validate_amount(value: int | str, name: str) -> int:
    """Accept an int (or its decimal text) within the ledger's unsigned word size."""
    if isinstance(value, (bool, float)):
        raise ValidationError(f"{name} must be an integer, got {value!r}")
    try:
        return _UINT256.validate_python(int(value))
    except (TypeError, ValueError) as exc:
        # pydantic.ValidationError subclasses ValueError.
        raise ValidationError(f"{name} must be a non-negative integer, got {value!r}") from exc


def validate_proposal_id(value: int | str) -> int:
    return validate_amount(value, "proposal_id")


class LifecycleDispatcher:
    """Maps each governance action onto its ledger call and decodes the result."""

    def __init__(self, ledger: LedgerGateway) -> None:
        self.ledger = ledger

    async def _send(self, sender: str, method: str, *args: Any) -> Receipt:
        sender = validate_address(sender, "sender")
        logger.info("ledger_call_submitted method=%s sender=%s args=%s", method, sender, args)
        receipt = await self.ledger.transact(sender, method, *args)
        logger.info(
            "ledger_call_confirmed method=%s tx=%s block=%s",
            method,
            receipt.tx_hash,
            receipt.block_number,
        )
        return receipt

    @staticmethod
    def _expect(receipt: Receipt, event_name: str) -> LedgerEvent:
        event = receipt.first_event(event_name)
        if event is None:
            raise UnexpectedReceipt(receipt.method, event_name)
        return event

    def _submitted(self, receipt: Receipt) -> SubmitOutcome:
        event = self._expect(receipt, "SubmitProposal")
        return SubmitOutcome(proposal_id=int(event.args["proposalId"]), tx_hash=receipt.tx_hash)

    # --- Submission ---

    async def submit(
        self,
        sender: str,
        applicant: str,
        shares: int,
        loot: int,
        tribute: int,
        tribute_token: str,
        payment: int,
        payment_token: str,
        details: str,
    ) -> SubmitOutcome:
        """Submit a membership/funding proposal. Returns the ledger-assigned id."""
        receipt = await self._send(
            sender,
            "submitProposal",
            validate_address(applicant, "applicant"),
            validate_amount(shares, "shares"),
            validate_amount(loot, "loot"),
            validate_amount(tribute, "tribute"),
            validate_address(tribute_token, "tribute_token"),
            validate_amount(payment, "payment"),
            validate_address(payment_token, "payment_token"),
            details,
        )
        return self._submitted(receipt)

    async def submit_whitelist(self, sender: str, token: str, details: str) -> SubmitOutcome:
        receipt = await self._send(
            sender, "submitWhitelistProposal", validate_address(token, "token"), details
        )
        return self._submitted(receipt)

    async def submit_guild_kick(self, sender: str, member: str, details: str) -> SubmitOutcome:
        receipt = await self._send(
            sender, "submitGuildKickProposal", validate_address(member, "member"), details
        )
        return self._submitted(receipt)

    # --- Sponsorship, voting, processing ---

    async def sponsor(self, sender: str, proposal_id: int) -> SponsorOutcome:
        receipt = await self._send(sender, "sponsorProposal", validate_proposal_id(proposal_id))
        args = self._expect(receipt, "SponsorProposal").args
        return SponsorOutcome(
            delegate_key=args["delegateKey"],
            member_address=args["memberAddress"],
            proposal_id=int(args["proposalId"]),
            queue_index=int(args["proposalIndex"]),
            starting_period=int(args["startingPeriod"]),
            tx_hash=receipt.tx_hash,
        )

    async def vote(self, sender: str, proposal_id: int, vote: str | VoteChoice) -> Receipt:
        """Cast a ballot. The vote value is checked before any call is made."""
        choice = parse_vote(vote)
        return await self._send(
            sender, "submitVote", validate_proposal_id(proposal_id), int(choice)
        )

    async def process(self, sender: str, proposal_id: int) -> Receipt:
        return await self._send(sender, "processProposal", validate_proposal_id(proposal_id))

    async def process_whitelist(self, sender: str, proposal_id: int) -> Receipt:
        return await self._send(
            sender, "processWhitelistProposal", validate_proposal_id(proposal_id)
        )

    async def process_guild_kick(self, sender: str, proposal_id: int) -> Receipt:
        return await self._send(
            sender, "processGuildKickProposal", validate_proposal_id(proposal_id)
        )

    async def cancel(self, sender: str, proposal_id: int) -> Receipt:
        """Cancel an unsponsored proposal. The ledger rejects it after sponsorship."""
        return await self._send(sender, "cancelProposal", validate_proposal_id(proposal_id))

    # --- Member exits and housekeeping ---

    def _ragequit_outcome(self, receipt: Receipt) -> RagequitOutcome:
        args = self._expect(receipt, "Ragequit").args
        return RagequitOutcome(
            member_address=args["memberAddress"],
            shares_burned=int(args["sharesToBurn"]),
            loot_burned=int(args["lootToBurn"]),
            tx_hash=receipt.tx_hash,
        )

    async def ragequit(self, sender: str, shares: int, loot: int) -> RagequitOutcome:
        receipt = await self._send(
            sender,
            "ragequit",
            validate_amount(shares, "shares"),
            validate_amount(loot, "loot"),
        )
        return self._ragequit_outcome(receipt)

    async def ragekick(self, sender: str, member: str) -> RagequitOutcome:
        """Force a jailed member out. Any caller may do this."""
        receipt = await self._send(sender, "ragekick", validate_address(member, "member"))
        return self._ragequit_outcome(receipt)

    async def update_delegate(self, sender: str, new_delegate: str) -> Receipt:
        return await self._send(
            sender, "updateDelegateKey", validate_address(new_delegate, "new_delegate")
        )

    async def withdraw(self, sender: str, token: str, amount: int) -> Receipt:
        """Withdraw ``amount`` base units of ``token`` from the caller's ledger balance."""
        return await self._send(
            sender,
            "withdrawBalance",
            validate_address(token, "token"),
            validate_amount(amount, "amount"),
        )

    async def collect(self, sender: str, token: str) -> Receipt:
        return await self._send(sender, "collectTokens", validate_address(token, "token"))
