"""Stock count and reconciliation workflow."""

from .adjust import AdjustmentRunner, adjustment_summary, validate_adjustments
from .compare import Comparator, CountComparison, EmptyCountError, InvalidCountError
from .entries import CountEntryStore
from .search import SearchController
from .session import CountSession, InvalidTransitionError

__all__ = [
    "AdjustmentRunner",
    "Comparator",
    "CountComparison",
    "CountEntryStore",
    "CountSession",
    "EmptyCountError",
    "InvalidCountError",
    "InvalidTransitionError",
    "SearchController",
    "adjustment_summary",
    "validate_adjustments",
]
