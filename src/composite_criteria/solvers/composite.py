"""
Composite Failure Solver.

Drives a complete composite failure run:

1. Resolve regions (groups) and their materials
2. For each region, classify the theory families and derive the Tsai-Wu
   coefficients; skip the region if no family is available
3. Evaluate every location of the region
4. Aggregate the failure counts and write the report
"""

import logging
import time
from pathlib import Path
from typing import Optional, Sequence, Union

from composite_criteria.constitutive.availability import classify_availability
from composite_criteria.core.config import FailureJobConfig
from composite_criteria.core.stress import StressField, default_ids
from composite_criteria.postprocess.report import CriteriaReportWriter
from composite_criteria.solvers.aggregate import AggregateReport, aggregate_results
from composite_criteria.solvers.context import EvaluationContext
from composite_criteria.solvers.evaluator import CriterionResults, LocationEvaluator
from composite_criteria.solvers.groups import GroupResolver


class CompositeFailureSolver:
    """
    Evaluates composite failure criteria over a stress field.

    Parameters
    ----------
    stress : StressField
        Stress histories of every location.
    resolver : GroupResolver
        Region layout; must cover ``stress.n_locations`` locations.
    context : EvaluationContext, optional
        Job metadata, messenger and stress-strain inverter.
    main_ids, sub_ids : sequence, optional
        Location identifiers for the report (default 1..N and 1).
    write_report : bool
        Write the report file at the end of :meth:`run`.

    Examples
    --------
    >>> solver = CompositeFailureSolver(stress, GroupResolver(n, default_material=mat))
    >>> report = solver.run()
    >>> report.counts["MSTRS"]
    """

    def __init__(
        self,
        stress: StressField,
        resolver: GroupResolver,
        context: Optional[EvaluationContext] = None,
        main_ids: Optional[Sequence] = None,
        sub_ids: Optional[Sequence] = None,
        write_report: bool = True,
    ):
        if resolver.n_locations != stress.n_locations:
            raise ValueError(
                f"Regions cover {resolver.n_locations} locations "
                f"but the stress field has {stress.n_locations}"
            )

        self.stress = stress
        self.resolver = resolver
        self.context = context or EvaluationContext()
        self.main_ids, self.sub_ids = default_ids(stress.n_locations, main_ids, sub_ids)
        self.write_report = write_report

        self.results: Optional[CriterionResults] = None
        self.report: Optional[AggregateReport] = None
        self.report_path: Optional[Path] = None
        self._logger = logging.getLogger(__name__)

    def run(self) -> AggregateReport:
        """
        Evaluate every region and aggregate the results.

        Returns
        -------
        AggregateReport
            Failure counts, per-location values and identifiers.
        """
        start_time = time.perf_counter()
        self._logger.info(
            f"Composite failure: {self.stress.n_locations} locations, "
            f"{self.stress.n_samples} samples, {len(self.resolver)} region(s)"
        )

        results = CriterionResults.allocate(self.stress.n_locations)
        evaluated = set()

        for span in self.resolver.spans():
            availability = classify_availability(span.material)
            if not availability.any_enabled:
                self._logger.warning(
                    "Region '%s' (material '%s'): no failure criteria can be evaluated",
                    span.name,
                    span.material.name,
                )
                continue

            evaluated |= availability.enabled_families()
            evaluator = LocationEvaluator(span.material, availability, results, self.context)
            for location in span.locations():
                evaluator.evaluate(
                    location,
                    self.stress.location(location),
                    main_id=self.main_ids[location],
                    sub_id=self.sub_ids[location],
                )

        self.results = results
        self.report = aggregate_results(
            results, self.main_ids, self.sub_ids, frozenset(evaluated), self.context.messenger
        )

        if self.write_report:
            writer = CriteriaReportWriter(self.context.job, self.context.messenger)
            self.report_path = writer.write(self.report)

        self._logger.info(f"Composite failure completed in {time.perf_counter() - start_time:.3f}s")
        return self.report


def run_from_yaml(
    yaml_path: Union[str, Path], output_directory: Optional[Union[str, Path]] = None
) -> AggregateReport:
    """
    Run a composite failure job described by a YAML file.

    Parameters
    ----------
    yaml_path : str or Path
        Job configuration file.
    output_directory : str or Path, optional
        Overrides ``job.output_directory``.

    Returns
    -------
    AggregateReport
        The run's aggregate report.
    """
    config = FailureJobConfig.from_yaml(yaml_path)
    if output_directory is not None:
        config.job.output_directory = str(output_directory)

    stress, main_ids, sub_ids = config.stress.load()
    resolver = config.build_resolver(stress.n_locations)
    context = EvaluationContext(job=config.job)

    solver = CompositeFailureSolver(stress, resolver, context, main_ids=main_ids, sub_ids=sub_ids)
    return solver.run()
