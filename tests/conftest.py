"""Shared test fixtures."""

from __future__ import annotations

import pytest
from sandbox import (
    ALICE,
    BOB,
    DAI,
    DEPOSIT,
    SANDBOX_ADDRESS,
    SANDBOX_NETWORK,
    WETH,
    RecordingLedger,
    SandboxLedger,
)

from guildkeeper.config import DaoConfig, Settings
from guildkeeper.main import GuildClient


@pytest.fixture
def settings() -> Settings:
    """Test settings bound to the in-memory ledger."""
    return Settings(
        guildkeeper_network=SANDBOX_NETWORK,
        guildkeeper_ledger_addresses={SANDBOX_NETWORK: SANDBOX_ADDRESS},
    )


@pytest.fixture
def config(settings: Settings) -> DaoConfig:
    return settings.to_config()


@pytest.fixture
def ledger() -> SandboxLedger:
    sandbox = SandboxLedger(
        summoner=ALICE,
        deposit_token=WETH,
        proposal_deposit=DEPOSIT,
        processing_reward=1,
        extra_tokens=(DAI,),
    )
    sandbox.mint(WETH, ALICE, 1_000)
    sandbox.mint(WETH, BOB, 100)
    sandbox.mint(DAI, BOB, 100)
    return sandbox


@pytest.fixture
def recorder(ledger: SandboxLedger) -> RecordingLedger:
    return RecordingLedger(ledger)


@pytest.fixture
def client(config: DaoConfig, recorder: RecordingLedger) -> GuildClient:
    return GuildClient(config, recorder, recorder)
