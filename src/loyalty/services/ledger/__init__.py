"""Customer ledger core: filters, claim rules and the cached paginated list."""

from .cache import ListCache
from .filters import FilterState, is_empty, normalize
from .keys import build_key
from .policy import CLAIM_UNIT, claim_options, default_claim_amount, is_eligible, max_claimable

__all__ = [
    "CLAIM_UNIT",
    "FilterState",
    "ListCache",
    "build_key",
    "claim_options",
    "default_claim_amount",
    "is_eligible",
    "is_empty",
    "max_claimable",
    "normalize",
]
