"""Governance models — Proposals, Members, votes, and decoded call outcomes.

See docs/GLOSSARY.md: Proposal, Sponsorship, Tribute, Ragequit,
Ragekick, Grace period, Delegate key.
"""

from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel, Field

from guildkeeper.models.ledger import ZERO_ADDRESS, Address, Uint256


class VoteChoice(IntEnum):
    """Ballot values as the ledger encodes them. 0 (null) is never sent."""

    YES = 1
    NO = 2


class Proposal(BaseModel):
    """A proposal record as read from the ledger.

    ``id`` is assigned by the ledger at submission and never changes.
    ``sponsor`` is the zero address until the proposal is sponsored.
    """

    id: int = Field(ge=0)
    applicant: Address
    proposer: Address
    sponsor: Address = ZERO_ADDRESS
    shares_requested: Uint256 = 0
    loot_requested: Uint256 = 0
    tribute_offered: Uint256 = 0
    tribute_token: Address = ZERO_ADDRESS
    payment_requested: Uint256 = 0
    payment_token: Address = ZERO_ADDRESS
    starting_period: int = Field(default=0, ge=0)
    yes_votes: Uint256 = 0
    no_votes: Uint256 = 0
    details: str = ""

    # Status flags
    sponsored: bool = False
    processed: bool = False
    did_pass: bool = False
    cancelled: bool = False
    whitelist: bool = False
    guild_kick: bool = False


class Member(BaseModel):
    """A member record as read from the ledger."""

    address: Address
    delegate_key: Address = ZERO_ADDRESS
    shares: Uint256 = 0
    loot: Uint256 = 0
    exists: bool = False
    jailed: bool = False


class ProcessedProposal(BaseModel):
    """A decoded ``ProcessProposal`` event."""

    proposal_index: int = Field(ge=0)
    proposal_id: int = Field(ge=0)
    did_pass: bool
    block_number: int = Field(ge=0)


class MemberSnapshot(BaseModel):
    """One row of the reconstructed membership read model."""

    member: Member
    proposal_id: int = Field(ge=0)
    token: Address
    token_balance: Uint256 = 0


# --- Outcomes decoded from receipts ---


class SubmitOutcome(BaseModel):
    proposal_id: int = Field(ge=0)
    tx_hash: str = ""


class SponsorOutcome(BaseModel):
    """Decoded ``SponsorProposal`` event."""

    delegate_key: Address
    member_address: Address
    proposal_id: int = Field(ge=0)
    queue_index: int = Field(ge=0)
    starting_period: int = Field(ge=0)
    tx_hash: str = ""


class RagequitOutcome(BaseModel):
    """Decoded ``Ragequit`` event. Tokens are credited inside the ledger."""

    member_address: Address
    shares_burned: Uint256 = 0
    loot_burned: Uint256 = 0
    tx_hash: str = ""
