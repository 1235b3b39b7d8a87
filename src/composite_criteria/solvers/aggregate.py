"""
Aggregation of composite failure results.

Counts the failing locations of every criterion. A location fails a
criterion when its value is at least 1, except for the through-thickness
Tsai-Wu criterion, whose threshold is lowered by the interlaminar shear
ratio k:

    TSAIWTT ≥ 1 - k²

Non-finite shear ratios (τ23 = 0) are replaced by 0 before the threshold is
applied.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet

import numpy as np

from composite_criteria.constitutive.availability import TheoryFamily
from composite_criteria.constitutive.failure import Criterion
from composite_criteria.postprocess.messages import FAILURE_CODES, Messenger
from composite_criteria.solvers.evaluator import CriterionResults

logger = logging.getLogger(__name__)

FAILURE_THRESHOLD = 1.0


@dataclass(frozen=True)
class FailureCounts:
    """Number of failing locations per criterion."""

    counts: Dict[Criterion, int]

    def __getitem__(self, criterion: Criterion) -> int:
        return self.counts[Criterion(criterion)]

    @property
    def total(self) -> int:
        """Sum of the per-criterion counts."""
        return sum(self.counts.values())

    @property
    def any_failed(self) -> bool:
        """True if any location failed any criterion."""
        return any(self.counts.values())

    def to_dict(self) -> Dict[str, int]:
        """Counts keyed by report column name."""
        return {criterion.value: count for criterion, count in self.counts.items()}


@dataclass
class AggregateReport:
    """
    Final product of a composite failure run.

    Attributes
    ----------
    counts : FailureCounts
        Failing locations per criterion.
    results : CriterionResults
        Reduced criterion values per location (shear ratio sanitized).
    main_ids, sub_ids : np.ndarray
        Location identifiers for the report rows.
    evaluated : frozenset of TheoryFamily
        Families evaluated in at least one region.
    """

    counts: FailureCounts
    results: CriterionResults
    main_ids: np.ndarray
    sub_ids: np.ndarray
    evaluated: FrozenSet[TheoryFamily] = field(default_factory=frozenset)

    @property
    def any_evaluated(self) -> bool:
        """True if any theory family was enabled in any region."""
        return bool(self.evaluated)


def sanitize_shear_ratio(ratio: np.ndarray) -> np.ndarray:
    """Copy of ``ratio`` with inf and nan replaced by 0."""
    ratio = np.asarray(ratio, dtype=float)
    return np.where(np.isfinite(ratio), ratio, 0.0)


def count_failures(results: CriterionResults) -> FailureCounts:
    """
    Count failing locations of every criterion.

    ``results.shear_ratio`` is expected to be sanitized already.
    """
    counts = {}
    for criterion in Criterion:
        values = results[criterion]
        if criterion is Criterion.TSAI_WU_TT:
            threshold = FAILURE_THRESHOLD - results.shear_ratio**2
        else:
            threshold = FAILURE_THRESHOLD
        counts[criterion] = int(np.count_nonzero(values >= threshold))
    return FailureCounts(counts=counts)


def aggregate_results(
    results: CriterionResults,
    main_ids: np.ndarray,
    sub_ids: np.ndarray,
    evaluated: FrozenSet[TheoryFamily],
    messenger: Messenger,
) -> AggregateReport:
    """
    Sanitize the shear ratio, count failures and notify failing criteria.

    Parameters
    ----------
    results : CriterionResults
        Reduced criterion values; ``shear_ratio`` is sanitized in place.
    main_ids, sub_ids : np.ndarray
        Location identifiers.
    evaluated : frozenset of TheoryFamily
        Families enabled in at least one region.
    messenger : Messenger
        Receives one failure message per criterion with failures.

    Returns
    -------
    AggregateReport
        Counts, results and identifiers.
    """
    non_finite = int(np.count_nonzero(~np.isfinite(results.shear_ratio)))
    if non_finite:
        logger.debug("Replacing %d non-finite interlaminar shear ratios with 0", non_finite)
    results.shear_ratio = sanitize_shear_ratio(results.shear_ratio)

    counts = count_failures(results)

    # Notification order follows the message code order
    for criterion in sorted(FAILURE_CODES, key=FAILURE_CODES.get):
        if counts[criterion] > 0:
            messenger.write_failure(criterion, counts[criterion])

    return AggregateReport(
        counts=counts,
        results=results,
        main_ids=np.asarray(main_ids),
        sub_ids=np.asarray(sub_ids),
        evaluated=frozenset(evaluated),
    )
