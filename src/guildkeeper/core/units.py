"""Conversion between whole-token quantities and integer base units.

The ledger only deals in base units (18 decimals for ether-like tokens).
Operators think in whole tokens, so listings show whole tokens and withdraw
amounts may be typed as decimals like ``"1.5"``.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext

from guildkeeper.errors import ValidationError

DEFAULT_DECIMALS = 18


def to_base_units(amount: str | int | Decimal, decimals: int = DEFAULT_DECIMALS) -> int:
    """``"1.5"`` → ``1500000000000000000``. Rejects negatives and sub-unit dust."""
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation as exc:
        raise ValidationError(f"Not a decimal token amount: {amount!r}") from exc
    if not value.is_finite() or value < 0:
        raise ValidationError(f"Token amount must be a non-negative number: {amount!r}")
    with localcontext() as ctx:
        ctx.prec = 100
        scaled = value.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValidationError(
            f"{amount!r} has more than {decimals} decimal places"
        )
    return int(scaled)


def from_base_units(amount: int, decimals: int = DEFAULT_DECIMALS) -> str:
    """``1500000000000000000`` → ``"1.5"``. Trailing zeros are dropped."""
    if amount < 0:
        raise ValidationError(f"Base-unit amount must be non-negative: {amount}")
    whole, frac = divmod(amount, 10**decimals)
    if frac == 0 or decimals == 0:
        return str(whole)
    digits = str(frac).rjust(decimals, "0").rstrip("0")
    return f"{whole}.{digits}"
