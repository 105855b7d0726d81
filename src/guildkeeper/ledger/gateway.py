"""Narrow interfaces to the ledger and token contracts.

guildkeeper never talks to a node itself. Anything that satisfies these
protocols (an RPC adapter, an in-memory test ledger) can drive it.

Contract for implementations:
- ``transact``/``approve`` return only after the transaction is confirmed.
- A revert raises ``LedgerRejection`` carrying the ledger's reason verbatim.
- Reads have no side effects and may be repeated freely.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from guildkeeper.models.governance import Member, Proposal
from guildkeeper.models.ledger import LedgerEvent, Receipt


@runtime_checkable
class LedgerGateway(Protocol):
    """The deployed governance contract."""

    @property
    def address(self) -> str: ...

    async def proposal_deposit(self) -> int: ...

    async def deposit_token(self) -> str: ...

    async def proposal_count(self) -> int: ...

    async def get_proposal(self, proposal_id: int) -> Proposal: ...

    async def get_member(self, address: str) -> Member: ...

    async def get_user_token_balance(self, user: str, token: str) -> int: ...

    async def block_number(self) -> int: ...

    async def get_events(
        self, name: str, from_block: int, to_block: int
    ) -> list[LedgerEvent]: ...

    async def transact(self, sender: str, method: str, *args: Any) -> Receipt: ...


@runtime_checkable
class TokenGateway(Protocol):
    """Standard fungible-token escrow primitives, for any token address."""

    async def balance_of(self, token: str, holder: str) -> int: ...

    async def allowance(self, token: str, holder: str, spender: str) -> int: ...

    async def approve(
        self, token: str, holder: str, spender: str, amount: int
    ) -> Receipt: ...
