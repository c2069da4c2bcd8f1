"""Points claim validation and submission."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any

from ...errors import ValidationError
from ...models.domain import ClaimOutcome, Points
from .policy import CLAIM_UNIT, max_claimable

if TYPE_CHECKING:
    from ...persistence.store import CustomerStore

logger = logging.getLogger(__name__)


def validate_amount(amount: Any) -> int:
    """Check that ``amount`` is a positive whole multiple of the claim unit."""
    if isinstance(amount, bool) or not isinstance(amount, (int, float)) or not math.isfinite(amount) or amount <= 0:
        raise ValidationError("Please enter a valid claim amount", reason="not_positive")
    if amount != int(amount) or int(amount) % CLAIM_UNIT != 0:
        raise ValidationError(
            f"Claim amount must be a multiple of {CLAIM_UNIT} points", reason="not_multiple"
        )
    return int(amount)


def validate_claim(customer_code: str, amount: Any, current_unclaimed: Points) -> int:
    """Check a claim against the local balance snapshot and return the amount as an int.

    Raises:
        ValidationError: with ``reason`` set to one of ``missing_code``,
            ``not_positive``, ``not_multiple``, ``exceeds_balance`` or
            ``exceeds_max_claimable``.
    """
    if not customer_code or not str(customer_code).strip():
        raise ValidationError("Customer code is required", reason="missing_code")
    amount = validate_amount(amount)
    if amount > current_unclaimed:
        raise ValidationError(
            f"Cannot claim {amount} points. Only {current_unclaimed} points available.",
            reason="exceeds_balance",
            details={"available": current_unclaimed},
        )
    limit = max_claimable(current_unclaimed)
    if amount > limit:
        raise ValidationError(
            f"Cannot claim {amount} points. Maximum claimable in multiples of {CLAIM_UNIT}: {limit} points.",
            reason="exceeds_max_claimable",
            details={"max_claimable": limit},
        )
    return amount


async def claim(
    store: CustomerStore, customer_code: str, amount: Any, current_unclaimed: Points
) -> ClaimOutcome:
    """Validate locally, then redeem through the store's atomic claim procedure.

    The store re-checks the authoritative balance; ``current_unclaimed`` is only
    the caller's snapshot. On success the caller must invalidate cached pages.
    """
    amount = validate_claim(customer_code, amount, current_unclaimed)
    code = str(customer_code).strip()
    message = await store.claim_points(code, amount)
    logger.info(f"Claimed {amount} points for customer {code}")
    return ClaimOutcome(
        customer_code=code,
        amount=amount,
        message=message,
        remaining=current_unclaimed - amount,
    )
