from .aggregate import AggregateReport, FailureCounts, aggregate_results
from .composite import CompositeFailureSolver, run_from_yaml
from .context import EvaluationContext
from .evaluator import CriterionResults, LocationEvaluator
from .groups import GroupResolver, RegionDefinition, RegionSpan

__all__ = [
    "AggregateReport",
    "FailureCounts",
    "aggregate_results",
    "CompositeFailureSolver",
    "run_from_yaml",
    "EvaluationContext",
    "CriterionResults",
    "LocationEvaluator",
    "GroupResolver",
    "RegionDefinition",
    "RegionSpan",
]
