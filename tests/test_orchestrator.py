"""Tests for the submit-with-escrow and sponsor-with-allowance-check workflows."""

from collections import Counter

import pytest
from sandbox import (
    ALICE,
    BOB,
    CAROL,
    DAI,
    DEPOSIT,
    WETH,
    RecordingLedger,
    SandboxLedger,
    submit_raw,
)

from guildkeeper.config import DaoConfig
from guildkeeper.errors import (
    InsufficientAllowance,
    InsufficientFunds,
    InvalidVote,
    LedgerRejection,
    TokenQueryFailed,
    ValidationError,
)
from guildkeeper.main import GuildClient
from guildkeeper.models.ledger import Receipt


def _fresh_ledger(proposer_weth: int) -> SandboxLedger:
    """A sandbox where the summoner holds exactly ``proposer_weth`` of the deposit token."""
    sandbox = SandboxLedger(
        summoner=ALICE, deposit_token=WETH, proposal_deposit=DEPOSIT, extra_tokens=(DAI,)
    )
    if proposer_weth:
        sandbox.mint(WETH, ALICE, proposer_weth)
    sandbox.mint(DAI, BOB, 100)
    return sandbox


def _client(config: DaoConfig, sandbox: SandboxLedger) -> tuple[GuildClient, RecordingLedger]:
    recorder = RecordingLedger(sandbox)
    return GuildClient(config, recorder, recorder), recorder


class TestSubmitWithEscrow:
    async def test_tops_up_deposit_allowance_then_submits(self, config: DaoConfig) -> None:
        """Balance == deposit, allowance 0: one approval, then the submission."""
        sandbox = _fresh_ledger(proposer_weth=DEPOSIT)
        client, recorder = _client(config, sandbox)

        outcome = await client.orchestrator.submit_with_escrow(
            ALICE, BOB, 1, 0, 0, WETH, 0, WETH, "join"
        )

        assert recorder.methods == ["approve", "submitProposal"]
        assert await sandbox.allowance(WETH, ALICE, sandbox.address) >= DEPOSIT
        assert outcome.proposal_id == 0

    async def test_proposal_id_equals_prior_count(self, config: DaoConfig) -> None:
        sandbox = _fresh_ledger(proposer_weth=DEPOSIT)
        await submit_raw(sandbox, CAROL)
        client, recorder = _client(config, sandbox)
        count_before = await sandbox.proposal_count()

        outcome = await client.orchestrator.submit_with_escrow(
            ALICE, BOB, 1, 0, 0, WETH, 0, WETH, "second"
        )

        assert outcome.proposal_id == count_before == 1
        assert recorder.methods == ["approve", "submitProposal"]

    async def test_existing_allowance_skips_approval(
        self, client: GuildClient, recorder: RecordingLedger, ledger: SandboxLedger
    ) -> None:
        await ledger.approve(WETH, ALICE, ledger.address, DEPOSIT)
        await client.orchestrator.submit_with_escrow(ALICE, BOB, 1, 0, 0, WETH, 0, WETH, "")
        assert recorder.methods == ["submitProposal"]

    async def test_short_balance_aborts_with_no_calls(self, config: DaoConfig) -> None:
        sandbox = _fresh_ledger(proposer_weth=DEPOSIT - 1)
        client, recorder = _client(config, sandbox)

        with pytest.raises(InsufficientFunds) as exc_info:
            await client.orchestrator.submit_with_escrow(
                ALICE, BOB, 1, 0, 0, WETH, 0, WETH, ""
            )

        assert (exc_info.value.current, exc_info.value.required) == (DEPOSIT - 1, DEPOSIT)
        assert recorder.calls == []
        assert await sandbox.proposal_count() == 0

    async def test_applicant_without_tribute_allowance_blocks_submission(
        self, client: GuildClient, recorder: RecordingLedger, ledger: SandboxLedger
    ) -> None:
        await ledger.approve(WETH, ALICE, ledger.address, DEPOSIT)
        with pytest.raises(InsufficientAllowance) as exc_info:
            await client.orchestrator.submit_with_escrow(
                ALICE, BOB, 1, 0, 50, DAI, 0, WETH, ""
            )
        assert exc_info.value.holder == BOB
        assert exc_info.value.token == DAI
        assert "submitProposal" not in recorder.methods
        # The applicant's custody is never changed on their behalf.
        assert await ledger.allowance(DAI, BOB, ledger.address) == 0

    async def test_applicant_without_tribute_allowance_blocks_even_if_proposer_unready(
        self, client: GuildClient, recorder: RecordingLedger
    ) -> None:
        """The proposer's deposit gap is fixed; the applicant's tribute gap is not."""
        with pytest.raises(InsufficientAllowance):
            await client.orchestrator.submit_with_escrow(
                ALICE, BOB, 1, 0, 50, DAI, 0, WETH, ""
            )
        assert recorder.methods == ["approve"]

    async def test_applicant_short_on_tribute_balance(
        self, client: GuildClient, recorder: RecordingLedger, ledger: SandboxLedger
    ) -> None:
        await ledger.approve(WETH, ALICE, ledger.address, DEPOSIT)
        await ledger.approve(DAI, BOB, ledger.address, 500)
        with pytest.raises(InsufficientFunds) as exc_info:
            await client.orchestrator.submit_with_escrow(
                ALICE, BOB, 1, 0, 500, DAI, 0, WETH, ""
            )
        assert exc_info.value.holder == BOB
        assert recorder.calls == []

    async def test_tribute_escrowed_on_submission(
        self, client: GuildClient, ledger: SandboxLedger
    ) -> None:
        await ledger.approve(DAI, BOB, ledger.address, 50)
        outcome = await client.orchestrator.submit_with_escrow(
            ALICE, BOB, 3, 0, 50, DAI, 0, WETH, "tribute"
        )
        proposal = await ledger.get_proposal(outcome.proposal_id)
        assert (proposal.tribute_offered, proposal.tribute_token) == (50, DAI)
        assert await ledger.balance_of(DAI, BOB) == 50

    async def test_broken_tribute_token_aborts(
        self, client: GuildClient, recorder: RecordingLedger, ledger: SandboxLedger
    ) -> None:
        await ledger.approve(WETH, ALICE, ledger.address, DEPOSIT)
        ledger.break_token(DAI)
        with pytest.raises(TokenQueryFailed):
            await client.orchestrator.submit_with_escrow(
                ALICE, BOB, 1, 0, 5, DAI, 0, WETH, ""
            )
        assert recorder.calls == []

    async def test_malformed_input_rejected_before_approval(
        self, client: GuildClient, recorder: RecordingLedger
    ) -> None:
        with pytest.raises(ValidationError):
            await client.orchestrator.submit_with_escrow(
                ALICE, BOB, "lots", 0, 0, WETH, 0, WETH, ""
            )
        assert recorder.calls == []


class TestSponsorWithAllowanceCheck:
    async def test_insufficient_allowance_reports_current_and_required(
        self, client: GuildClient, recorder: RecordingLedger, ledger: SandboxLedger
    ) -> None:
        proposal_id = await submit_raw(ledger, BOB)
        await ledger.approve(WETH, ALICE, ledger.address, 5)

        with pytest.raises(InsufficientAllowance) as exc_info:
            await client.orchestrator.sponsor_with_allowance_check(ALICE, proposal_id)

        assert "5 < 10" in str(exc_info.value)
        assert (exc_info.value.current, exc_info.value.required) == (5, DEPOSIT)
        assert recorder.calls == []
        # Never raised on the sponsor's behalf.
        assert await ledger.allowance(WETH, ALICE, ledger.address) == 5

    async def test_sufficient_allowance_sponsors(
        self, client: GuildClient, recorder: RecordingLedger, ledger: SandboxLedger
    ) -> None:
        proposal_id = await submit_raw(ledger, BOB)
        await ledger.approve(WETH, ALICE, ledger.address, DEPOSIT)

        outcome = await client.orchestrator.sponsor_with_allowance_check(ALICE, proposal_id)

        assert recorder.methods == ["sponsorProposal"]
        assert outcome.proposal_id == proposal_id
        proposal = await ledger.get_proposal(proposal_id)
        assert proposal.sponsored is True
        assert proposal.sponsor == ALICE

    async def test_second_sponsorship_reverts_atomically(
        self, client: GuildClient, ledger: SandboxLedger
    ) -> None:
        """The ledger rejects it; the deposit pulled before the check is restored."""
        proposal_id = await submit_raw(ledger, BOB)
        await ledger.approve(WETH, ALICE, ledger.address, 2 * DEPOSIT)
        await client.orchestrator.sponsor_with_allowance_check(ALICE, proposal_id)

        with pytest.raises(LedgerRejection, match="already been sponsored"):
            await client.orchestrator.sponsor_with_allowance_check(ALICE, proposal_id)
        assert await ledger.allowance(WETH, ALICE, ledger.address) == DEPOSIT


class TestPassThrough:
    async def test_invalid_vote_issues_no_calls(
        self, client: GuildClient, recorder: RecordingLedger
    ) -> None:
        with pytest.raises(InvalidVote):
            await client.orchestrator.vote(ALICE, 0, "abstain")
        assert recorder.calls == []

    async def test_whitelist_submission(
        self, client: GuildClient, recorder: RecordingLedger
    ) -> None:
        outcome = await client.orchestrator.submit_whitelist(ALICE, "0x" + "77" * 20, "add")
        assert outcome.proposal_id == 0
        assert recorder.methods == ["submitWhitelistProposal"]


class DriftingTokens:
    """Token gateway whose reads grow by ``step`` on every repeat of the same query."""

    def __init__(self, inner: SandboxLedger, step: int) -> None:
        self.inner = inner
        self.step = step
        self.reads: Counter[str] = Counter()

    def _drift(self, query: str) -> int:
        drift = self.step * self.reads[query]
        self.reads[query] += 1
        return drift

    async def balance_of(self, token: str, holder: str) -> int:
        return await self.inner.balance_of(token, holder) + self._drift("balance_of")

    async def allowance(self, token: str, holder: str, spender: str) -> int:
        return await self.inner.allowance(token, holder, spender) + self._drift("allowance")

    async def approve(self, token: str, holder: str, spender: str, amount: int) -> Receipt:
        return await self.inner.approve(token, holder, spender, amount)


class TestDiagnosticsUnderConcurrentChange:
    """Each check reads once, so a failure reports the value it failed on."""

    async def test_balance_shortfall_reports_the_value_checked(self, config: DaoConfig) -> None:
        sandbox = _fresh_ledger(proposer_weth=DEPOSIT - 1)
        tokens = DriftingTokens(sandbox, step=DEPOSIT)
        client = GuildClient(config, sandbox, tokens)

        with pytest.raises(InsufficientFunds) as exc_info:
            await client.orchestrator.submit_with_escrow(
                ALICE, BOB, 1, 0, 0, WETH, 0, WETH, ""
            )

        assert (exc_info.value.current, exc_info.value.required) == (DEPOSIT - 1, DEPOSIT)
        assert tokens.reads["balance_of"] == 1

    async def test_sponsor_allowance_shortfall_reports_the_value_checked(
        self, config: DaoConfig, ledger: SandboxLedger
    ) -> None:
        proposal_id = await submit_raw(ledger, BOB)
        await ledger.approve(WETH, ALICE, ledger.address, 5)
        tokens = DriftingTokens(ledger, step=DEPOSIT)
        client = GuildClient(config, ledger, tokens)

        with pytest.raises(InsufficientAllowance) as exc_info:
            await client.orchestrator.sponsor_with_allowance_check(ALICE, proposal_id)

        assert "5 < 10" in str(exc_info.value)
        assert exc_info.value.current == 5
        assert tokens.reads["allowance"] == 1
