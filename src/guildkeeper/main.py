"""guildkeeper entry point — wires configuration, gateways and components.

Usage:
    ledger = MyRpcLedger(...)  # any LedgerGateway + TokenGateway
    client = create_client(Settings(guildkeeper_network="mainnet"), ledger, ledger)
    outcome = await client.orchestrator.submit_with_escrow(alice, ...)
    view = await client.reconciler.list_members()
"""

from __future__ import annotations

import logging

from guildkeeper.config import DaoConfig, Settings, configure_logging
from guildkeeper.core.dispatcher import LifecycleDispatcher
from guildkeeper.core.escrow import TokenEscrowValidator
from guildkeeper.core.orchestrator import ProposalOrchestrator
from guildkeeper.core.reconciler import StateReconciler
from guildkeeper.core.units import to_base_units
from guildkeeper.errors import ConfigurationError
from guildkeeper.ledger.gateway import LedgerGateway, TokenGateway
from guildkeeper.models.ledger import Receipt

logger = logging.getLogger(__name__)


class GuildClient:
    """One DAO deployment's components, sharing a single frozen config.

    Holds no identity: every operation names the account it acts as.
    """

    def __init__(self, config: DaoConfig, ledger: LedgerGateway, tokens: TokenGateway) -> None:
        self.config = config
        self.ledger = ledger
        self.escrow = TokenEscrowValidator(tokens)
        self.dispatcher = LifecycleDispatcher(ledger)
        self.orchestrator = ProposalOrchestrator(config, ledger, self.escrow, self.dispatcher)
        self.reconciler = StateReconciler(config, ledger)

    async def withdraw_tokens(self, member: str, token: str, amount: str) -> Receipt:
        """Withdraw a whole-token quantity such as ``"2.5"`` from the guild bank."""
        return await self.orchestrator.withdraw(member, token, to_base_units(amount))


def create_client(
    settings: Settings,
    ledger: LedgerGateway,
    tokens: TokenGateway,
    network: str | None = None,
) -> GuildClient:
    """Resolve the network binding and build a client for it.

    Raises ConfigurationError if nothing is bound for the network or the
    gateway points at a different contract than the one configured.
    """
    configure_logging(settings)
    config = settings.to_config(network)
    if ledger.address.lower() != config.ledger_address:
        msg = (
            f"Gateway is bound to {ledger.address.lower()} but network "
            f"{config.network!r} is configured for {config.ledger_address}"
        )
        raise ConfigurationError(msg)
    logger.info("client_configured network=%s ledger=%s", config.network, config.ledger_address)
    return GuildClient(config, ledger, tokens)
