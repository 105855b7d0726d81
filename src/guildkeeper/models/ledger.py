"""Ledger primitives — addresses, bounded integers, events and receipts.

These are transient copies of ledger data. The ledger is authoritative;
nothing here is persisted by the client.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, Field, StringConstraints

ZERO_ADDRESS = "0x" + "0" * 40

UINT256_MAX = 2**256 - 1

# Addresses are compared case-insensitively, so normalize on the way in.
Address = Annotated[
    str,
    StringConstraints(strip_whitespace=True, pattern=r"^0x[0-9a-fA-F]{40}$"),
    AfterValidator(str.lower),
]

# Share, loot and token amounts: non-negative and within the ledger's word size.
Uint256 = Annotated[int, Field(ge=0, le=UINT256_MAX)]


class LedgerEvent(BaseModel):
    """A decoded event emitted by the ledger contract."""

    name: str
    block_number: int = Field(ge=0)
    log_index: int = Field(default=0, ge=0)
    args: dict[str, Any] = Field(default_factory=dict)


class Receipt(BaseModel):
    """Confirmation of a mined transaction, with its decoded events."""

    tx_hash: str
    method: str
    sender: Address
    block_number: int = Field(ge=0)
    logs: list[LedgerEvent] = Field(default_factory=list)

    def first_event(self, name: str) -> LedgerEvent | None:
        """Return the first event called ``name``, or None."""
        for log in self.logs:
            if log.name == name:
                return log
        return None
