"""Application settings via pydantic-settings. Loads from environment and .env file.

``Settings`` is the mutable, environment-facing layer. Components never read it
directly: they receive the frozen ``DaoConfig`` built once by ``to_config()``.
"""

from __future__ import annotations

import logging

import pydantic
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings

from guildkeeper.errors import ConfigurationError
from guildkeeper.models.ledger import Address

# Known deployments. An empty string means "network known, nothing deployed".
DEFAULT_LEDGER_ADDRESSES: dict[str, str] = {
    "develop": "0x9Fd6b308b593Ba02a5DbCfEF0F30fbBcA8B79B91",
    "ropsten": "",
    "mainnet": "0x1fd169A4f5c59ACf79d0Fd5d91D1201EF1Bce9f1",
}


class DaoConfig(BaseModel):
    """Immutable per-invocation configuration, injected into every component."""

    model_config = ConfigDict(frozen=True)

    network: str
    ledger_address: Address
    # Membership replay starts here. 0 scans from genesis.
    members_from_block: int = Field(default=0, ge=0)
    scan_page_size: int = Field(default=50, ge=1)
    event_chunk_blocks: int = Field(default=10_000, ge=1)


class Settings(BaseSettings):
    """guildkeeper configuration.

    All values can be overridden via environment variables or .env file.
    ``GUILDKEEPER_LEDGER_ADDRESSES`` takes a JSON object and is merged over
    the built-in deployments.
    """

    guildkeeper_network: str = ""
    guildkeeper_ledger_addresses: dict[str, str] = Field(default_factory=dict)

    # Reconciliation
    guildkeeper_members_from_block: int = 0
    guildkeeper_scan_page_size: int = 50
    guildkeeper_event_chunk_blocks: int = 10_000

    # Logging
    guildkeeper_log_level: str = "INFO"

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}

    def ledger_addresses(self) -> dict[str, str]:
        """Built-in deployments overlaid with the configured ones."""
        merged = dict(DEFAULT_LEDGER_ADDRESSES)
        merged.update(self.guildkeeper_ledger_addresses)
        return merged

    def to_config(self, network: str | None = None) -> DaoConfig:
        """Resolve the ledger binding for ``network`` and freeze the result.

        Raises ConfigurationError when no network is selected, the network has
        no bound address, or the bound address is malformed. Nothing has
        touched the ledger yet.
        """
        network = network or self.guildkeeper_network
        if not network:
            raise ConfigurationError("No network selected. Set GUILDKEEPER_NETWORK.")
        address = self.ledger_addresses().get(network, "")
        if not address:
            msg = (
                f"No ledger address bound for network {network!r}. "
                "Set it in GUILDKEEPER_LEDGER_ADDRESSES."
            )
            raise ConfigurationError(msg)
        try:
            return DaoConfig(
                network=network,
                ledger_address=address,
                members_from_block=self.guildkeeper_members_from_block,
                scan_page_size=self.guildkeeper_scan_page_size,
                event_chunk_blocks=self.guildkeeper_event_chunk_blocks,
            )
        except pydantic.ValidationError as exc:
            raise ConfigurationError(
                f"Invalid configuration for network {network!r}: {exc}"
            ) from exc


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.guildkeeper_log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
