"""Lifecycle state reconciliation — rebuilds read models from the ledger.

The ledger has no "current members" index, so membership is reconstructed by
replaying ``ProcessProposal`` events. Both scans are lazy async iterators that
can resume from an index or block, and neither writes anything. Nothing is
cached: every call recomputes from the ledger, so cost grows with history.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from pydantic import BaseModel, Field

from guildkeeper.config import DaoConfig
from guildkeeper.ledger.gateway import LedgerGateway
from guildkeeper.models.governance import MemberSnapshot, ProcessedProposal, Proposal
from guildkeeper.models.ledger import ZERO_ADDRESS

logger = logging.getLogger(__name__)

PROCESS_PROPOSAL_EVENT = "ProcessProposal"


class MembershipView(BaseModel):
    """Result of one membership reconstruction, pinned to a block range."""

    from_block: int = Field(ge=0)
    to_block: int = Field(ge=0)
    passing_proposal_ids: list[int] = Field(default_factory=list)
    members: list[MemberSnapshot] = Field(default_factory=list)


class StateReconciler:
    def __init__(self, config: DaoConfig, ledger: LedgerGateway) -> None:
        self.config = config
        self.ledger = ledger

    # --- Proposals ---

    async def proposal_page(self, offset: int, limit: int) -> list[Proposal]:
        """Fetch proposals ``offset`` .. ``offset + limit - 1`` that exist."""
        count = await self.ledger.proposal_count()
        end = min(offset + limit, count)
        return [await self.ledger.get_proposal(i) for i in range(offset, end)]

    async def iter_proposals(self, start: int = 0) -> AsyncIterator[Proposal]:
        """Yield proposals by id, a page at a time, from ``start`` to the count.

        The count is read once up front; proposals submitted mid-scan are picked
        up by the next scan (resume with ``start`` = last id + 1).
        """
        count = await self.ledger.proposal_count()
        page_size = self.config.scan_page_size
        for offset in range(start, count, page_size):
            end = min(offset + page_size, count)
            logger.debug("proposal_scan_page offset=%s end=%s count=%s", offset, end, count)
            for proposal_id in range(offset, end):
                yield await self.ledger.get_proposal(proposal_id)

    async def list_proposals(self, start: int = 0) -> list[Proposal]:
        return [proposal async for proposal in self.iter_proposals(start)]

    # --- Processed-proposal events ---

    async def iter_processed(
        self, from_block: int | None = None, to_block: int | None = None
    ) -> AsyncIterator[ProcessedProposal]:
        """Replay ``ProcessProposal`` events over a block range in fixed-size chunks.

        ``from_block`` defaults to the configured checkpoint and ``to_block`` to
        the tip at the moment the scan starts.
        """
        start = self.config.members_from_block if from_block is None else from_block
        end = await self.ledger.block_number() if to_block is None else to_block
        chunk = self.config.event_chunk_blocks
        for chunk_start in range(start, end + 1, chunk):
            chunk_end = min(chunk_start + chunk - 1, end)
            events = await self.ledger.get_events(PROCESS_PROPOSAL_EVENT, chunk_start, chunk_end)
            logger.debug(
                "event_scan_chunk from=%s to=%s events=%s", chunk_start, chunk_end, len(events)
            )
            for event in sorted(events, key=lambda e: (e.block_number, e.log_index)):
                yield ProcessedProposal(
                    proposal_index=int(event.args["proposalIndex"]),
                    proposal_id=int(event.args["proposalId"]),
                    did_pass=bool(event.args["didPass"]),
                    block_number=event.block_number,
                )

    async def passing_proposal_ids(
        self, from_block: int | None = None, to_block: int | None = None
    ) -> list[int]:
        return [
            processed.proposal_id
            async for processed in self.iter_processed(from_block, to_block)
            if processed.did_pass
        ]

    # --- Members ---

    async def list_members(
        self, from_block: int | None = None, to_block: int | None = None
    ) -> MembershipView:
        """Reconstruct membership from passing proposals.

        For each passing proposal, re-read the proposal to find its applicant,
        then read the applicant's member record and their ledger balance of the
        proposal's tribute token. An applicant admitted by several proposals is
        reported once, under the first.
        """
        start = self.config.members_from_block if from_block is None else from_block
        end = await self.ledger.block_number() if to_block is None else to_block

        passing = await self.passing_proposal_ids(start, end)
        snapshots: list[MemberSnapshot] = []
        seen: set[str] = set()
        for proposal_id in passing:
            proposal = await self.ledger.get_proposal(proposal_id)
            applicant = proposal.applicant
            if applicant == ZERO_ADDRESS or applicant in seen:
                continue
            seen.add(applicant)
            member = await self.ledger.get_member(applicant)
            balance = await self.ledger.get_user_token_balance(applicant, proposal.tribute_token)
            snapshots.append(
                MemberSnapshot(
                    member=member,
                    proposal_id=proposal_id,
                    token=proposal.tribute_token,
                    token_balance=balance,
                )
            )

        logger.info(
            "membership_reconciled from=%s to=%s passing=%s members=%s",
            start,
            end,
            len(passing),
            len(snapshots),
        )
        return MembershipView(
            from_block=start,
            to_block=end,
            passing_proposal_ids=passing,
            members=snapshots,
        )
