"""Plain-text renderings of proposals, members and sponsorship outcomes.

Tribute and guild-bank balances are shown in whole tokens; everything else is
shown exactly as the ledger reports it.
"""

from __future__ import annotations

from guildkeeper.core.reconciler import MembershipView
from guildkeeper.core.units import from_base_units
from guildkeeper.models.governance import MemberSnapshot, Proposal, SponsorOutcome

PROPOSAL_HEADER = "Actors\tShares\tLoot\tTribute\tPayment\tPeriod\tVotes\tDetails"


def format_proposal(proposal: Proposal) -> str:
    """Three lines: the summary row, then proposer, then sponsor."""
    row = " ".join(
        [
            f"{proposal.id}.",
            proposal.applicant,
            str(proposal.shares_requested),
            str(proposal.loot_requested),
            f"{from_base_units(proposal.tribute_offered)}/{proposal.tribute_token}",
            f"{proposal.payment_requested}/{proposal.payment_token}",
            str(proposal.starting_period),
            f"{proposal.yes_votes}/{proposal.no_votes}",
            proposal.details,
        ]
    )
    return "\n".join([row, f"   {proposal.proposer}", f"   {proposal.sponsor}"])


def format_proposal_listing(proposals: list[Proposal]) -> str:
    lines = [f"Total # of proposals {len(proposals)}", PROPOSAL_HEADER]
    lines.extend(format_proposal(p) for p in proposals)
    return "\n".join(lines)


def format_member(index: int, snapshot: MemberSnapshot) -> str:
    member = snapshot.member
    return "\n".join(
        [
            f"{index}. {member.address}",
            " ".join(
                [
                    member.delegate_key,
                    str(member.shares),
                    str(member.loot),
                    str(member.exists).lower(),
                    str(member.jailed).lower(),
                    from_base_units(snapshot.token_balance),
                ]
            ),
        ]
    )


def format_membership(view: MembershipView) -> str:
    lines = [
        f"Blocks {view.from_block}-{view.to_block}: "
        f"{len(view.passing_proposal_ids)} passing proposals, {len(view.members)} members"
    ]
    lines.extend(format_member(i, snapshot) for i, snapshot in enumerate(view.members))
    return "\n".join(lines)


def format_sponsorship(outcome: SponsorOutcome) -> str:
    return "\n".join(
        [
            f"Delegate key: {outcome.delegate_key}",
            f"Member: {outcome.member_address}",
            f"Proposal id: {outcome.proposal_id}",
            f"Proposal index in the queue: {outcome.queue_index}",
            f"Starting period: {outcome.starting_period}",
        ]
    )
