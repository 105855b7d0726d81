"""Token escrow validation — balances and spending allowances.

Every check reads the token contract fresh. Results are advisory: another
actor can move tokens between our read and the ledger's execution, in which
case the ledger reverts the dependent call.
"""

from __future__ import annotations

import logging

from guildkeeper.errors import LedgerRejection, TokenQueryFailed
from guildkeeper.ledger.gateway import TokenGateway
from guildkeeper.models.ledger import Receipt
from guildkeeper.models.tokens import EscrowSnapshot

logger = logging.getLogger(__name__)


class TokenEscrowValidator:
    """Reads and tops up token custody for any (token, holder, spender) triple."""

    def __init__(self, tokens: TokenGateway) -> None:
        self.tokens = tokens

    async def balance_of(self, token: str, holder: str) -> int:
        try:
            return await self.tokens.balance_of(token, holder)
        except LedgerRejection as exc:
            raise TokenQueryFailed(token, "balanceOf", exc) from exc

    async def allowance_of(self, token: str, holder: str, spender: str) -> int:
        try:
            return await self.tokens.allowance(token, holder, spender)
        except LedgerRejection as exc:
            raise TokenQueryFailed(token, "allowance", exc) from exc

    async def has_enough_balance(self, token: str, holder: str, amount: int) -> bool:
        """True iff ``holder`` currently holds at least ``amount`` of ``token``."""
        return await self.balance_of(token, holder) >= amount

    async def has_enough_allowance(
        self, token: str, holder: str, spender: str, amount: int
    ) -> bool:
        """True iff ``holder`` has approved ``spender`` for at least ``amount``."""
        return await self.allowance_of(token, holder, spender) >= amount

    async def snapshot(self, token: str, holder: str, spender: str) -> EscrowSnapshot:
        """Read balance and allowance once. Checks and their error reports share this read."""
        return EscrowSnapshot(
            token=token,
            holder=holder,
            spender=spender,
            balance=await self.balance_of(token, holder),
            allowance=await self.allowance_of(token, holder, spender),
        )

    async def raise_allowance(
        self, token: str, holder: str, spender: str, amount: int
    ) -> Receipt:
        """Approve ``spender`` for ``amount``. Always sends the approval.

        A revert from the token contract surfaces as LedgerRejection.
        """
        logger.info(
            "escrow_approve_submitted token=%s holder=%s spender=%s amount=%s",
            token,
            holder,
            spender,
            amount,
        )
        receipt = await self.tokens.approve(token, holder, spender, amount)
        logger.info(
            "escrow_approve_confirmed tx=%s block=%s", receipt.tx_hash, receipt.block_number
        )
        return receipt
