"""Error taxonomy for guildkeeper.

Every error is terminal for the invocation that raised it. Nothing here is
retried automatically; a retry is always a fresh, operator-initiated call.
"""

from __future__ import annotations


class GuildkeeperError(Exception):
    """Base class for every error raised by guildkeeper."""


class ConfigurationError(GuildkeeperError):
    """No usable ledger binding for the selected network."""


class ValidationError(GuildkeeperError):
    """A local pre-flight check failed. No mutating call was issued."""


class InsufficientFunds(ValidationError):
    """A holder's token balance is below the amount an action needs."""

    def __init__(self, holder: str, token: str, current: int, required: int) -> None:
        self.holder = holder
        self.token = token
        self.current = current
        self.required = required
        super().__init__(
            f"{holder} holds {current} < {required} of token {token}"
        )


class InsufficientAllowance(ValidationError):
    """A holder has not approved the ledger to move enough of a token."""

    def __init__(
        self,
        holder: str,
        token: str,
        spender: str,
        current: int,
        required: int,
    ) -> None:
        self.holder = holder
        self.token = token
        self.spender = spender
        self.current = current
        self.required = required
        super().__init__(
            f"allowance of {holder} for {spender} on token {token} is "
            f"{current} < {required}"
        )


class InvalidVote(ValidationError):
    """Vote text that is neither yes nor no."""

    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(f'Invalid vote {raw!r}. It must be "yes" or "no".')


class LedgerRejection(GuildkeeperError):
    """The ledger reverted a call. ``reason`` is the ledger's own text."""

    def __init__(self, method: str, reason: str) -> None:
        self.method = method
        self.reason = reason
        super().__init__(f"{method} reverted: {reason}")


class TokenQueryFailed(GuildkeeperError):
    """A read against a token contract failed (non-standard or broken token)."""

    def __init__(self, token: str, query: str, cause: Exception | None = None) -> None:
        self.token = token
        self.query = query
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"token {token} {query} failed{detail}")


class UnexpectedReceipt(GuildkeeperError):
    """A confirmed receipt is missing the event an outcome is decoded from."""

    def __init__(self, method: str, event: str) -> None:
        self.method = method
        self.event = event
        super().__init__(f"{method} receipt carries no {event} event")
