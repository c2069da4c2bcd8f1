"""Points claiming rules.

Claims are made in whole units of ``CLAIM_UNIT`` points. A customer is eligible
once the unclaimed balance covers at least one unit; whatever is left over
below a unit stays on the balance until more points accrue.
"""

from __future__ import annotations

import math

from ...models.domain import Points

CLAIM_UNIT = 5


def max_claimable(unclaimed: Points) -> int:
    return math.floor(unclaimed / CLAIM_UNIT) * CLAIM_UNIT


def is_eligible(unclaimed: Points) -> bool:
    return unclaimed >= CLAIM_UNIT


def claim_options(unclaimed: Points) -> list[int]:
    """Every valid claim amount in ascending order; empty when not eligible."""
    return list(range(CLAIM_UNIT, max_claimable(unclaimed) + 1, CLAIM_UNIT))


def default_claim_amount(unclaimed: Points) -> int:
    return min(CLAIM_UNIT, max_claimable(unclaimed))
