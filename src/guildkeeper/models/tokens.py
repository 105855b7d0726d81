"""Token escrow models.

An escrow relation is always read fresh. Never cache one across calls: the
holder (or anyone they authorize) can change it between the check and the use.
"""

from __future__ import annotations

from pydantic import BaseModel

from guildkeeper.models.ledger import Address, Uint256


class EscrowSnapshot(BaseModel):
    """Balance and allowance of ``holder`` for ``spender`` on ``token`` at one read."""

    token: Address
    holder: Address
    spender: Address
    balance: Uint256 = 0
    allowance: Uint256 = 0

    def covers(self, amount: int) -> bool:
        """True when both balance and allowance reach ``amount``."""
        return self.balance >= amount and self.allowance >= amount
