"""
Tests for the composite failure solver.

This module contains tests for:
1. Region resolution (GroupResolver)
2. Per-location evaluation (sentinels, reduction, strain paths)
3. Aggregation (thresholds, shear ratio sanitization, notifications)
4. Complete runs over multi-region stress fields
"""

import numpy as np
import pytest

from composite_criteria.constitutive.availability import (
    FamilyState,
    TheoryFamily,
    classify_availability,
)
from composite_criteria.constitutive.failure import Criterion
from composite_criteria.core.config import JobConfig
from composite_criteria.core.material import (
    HashinStrengths,
    MaterialParameters,
    StrainLimits,
    StressLimits,
)
from composite_criteria.core.stress import StressField
from composite_criteria.postprocess.messages import FAILURE_CODES, MessageCode, Messenger
from composite_criteria.solvers.aggregate import (
    aggregate_results,
    count_failures,
    sanitize_shear_ratio,
)
from composite_criteria.solvers.composite import CompositeFailureSolver
from composite_criteria.solvers.context import EvaluationContext
from composite_criteria.solvers.evaluator import SENTINEL, CriterionResults, LocationEvaluator
from composite_criteria.solvers.groups import DEFAULT_REGION, GroupResolver, RegionDefinition


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def stress_limits():
    return StressLimits(
        Xt=1500.0, Xc=1500.0, Yt=40.0, Yc=246.0, Zt=50.0, Zc=200.0, S=68.0, f12=-0.5, f23=0.0
    )


@pytest.fixture
def hashin_strengths():
    return HashinStrengths(Xt=1500.0, Xc=1500.0, Yt=40.0, Yc=246.0, SL=68.0, ST=34.0)


@pytest.fixture
def elastic_strain():
    """Fail strains with elastic constants only (degraded strain path)."""
    return StrainLimits(
        Xet=0.01, Xec=0.01, Yet=0.005, Yec=0.02, Se=0.01, E=100e3, nu=0.25
    )


@pytest.fixture
def full_material(stress_limits, elastic_strain, hashin_strengths):
    return MaterialParameters(
        name="full", stress=stress_limits, strain=elastic_strain, hashin=hashin_strengths
    )


@pytest.fixture
def stress_only(stress_limits):
    return MaterialParameters(name="stress-only", stress=stress_limits)


@pytest.fixture
def hashin_only(hashin_strengths):
    return MaterialParameters(name="hashin-only", hashin=hashin_strengths)


@pytest.fixture
def context(tmp_path):
    return EvaluationContext(job=JobConfig(name="test", output_directory=str(tmp_path)))


def run_solver(stress, material=None, regions=None, library=None, context=None, **kwargs):
    resolver = GroupResolver(
        stress.n_locations, default_material=material, regions=regions, library=library
    )
    kwargs.setdefault("write_report", False)
    solver = CompositeFailureSolver(stress, resolver, context=context, **kwargs)
    return solver, solver.run()


class PaddedInverter:
    """Elastic inverter that prepends two junk samples to every history."""

    def __init__(self):
        self.calls = 0

    def invert(self, stress, modulus, k_prime, n_prime):
        self.calls += 1
        return np.concatenate(([99.0, 99.0], np.asarray(stress, dtype=float) / modulus))


# =============================================================================
# Tests for GroupResolver
# =============================================================================

class TestGroupResolver:
    """Tests for region resolution."""

    def test_default_region(self, stress_only):
        resolver = GroupResolver(10, default_material=stress_only)
        spans = list(resolver.spans())

        assert resolver.is_default
        assert len(resolver) == 1
        assert len(spans) == 1
        assert spans[0].name == DEFAULT_REGION
        assert (spans[0].start, spans[0].count) == (0, 10)
        assert spans[0].material is stress_only

    def test_contiguous_spans(self, stress_only, hashin_only):
        resolver = GroupResolver(
            5,
            regions=[RegionDefinition("a", "s", 2), RegionDefinition("b", "h", 3)],
            library={"s": stress_only, "h": hashin_only},
        )
        spans = list(resolver.spans())

        assert [s.start for s in spans] == [0, 2]
        assert [s.stop for s in spans] == [2, 5]
        assert list(spans[1].locations()) == [2, 3, 4]
        assert spans[1].material is hashin_only

    def test_resolve(self, stress_only, hashin_only):
        resolver = GroupResolver(
            5,
            regions=[RegionDefinition("a", "s", 2), RegionDefinition("b", "h", 3)],
            library={"s": stress_only, "h": hashin_only},
        )
        assert resolver.resolve(1) == (3, hashin_only)

    def test_default_resolve_out_of_range(self, stress_only):
        with pytest.raises(IndexError):
            GroupResolver(3, default_material=stress_only).resolve(1)

    def test_sizes_must_cover_locations(self, stress_only):
        with pytest.raises(ValueError, match="cover"):
            GroupResolver(
                4, regions=[RegionDefinition("a", "s", 3)], library={"s": stress_only}
            )

    def test_unknown_material(self, stress_only):
        with pytest.raises(ValueError, match="unknown material"):
            GroupResolver(
                3, regions=[RegionDefinition("a", "x", 3)], library={"s": stress_only}
            )

    def test_empty_region_rejected(self, stress_only):
        with pytest.raises(ValueError):
            GroupResolver(
                3,
                regions=[RegionDefinition("a", "s", 0), RegionDefinition("b", "s", 3)],
                library={"s": stress_only},
            )

    def test_default_material_required(self):
        with pytest.raises(ValueError, match="default material"):
            GroupResolver(3)


# =============================================================================
# Tests for LocationEvaluator
# =============================================================================

class TestLocationEvaluator:
    """Tests for the per-location evaluation."""

    def test_results_start_at_sentinel(self):
        results = CriterionResults.allocate(4)

        assert len(results) == 4
        for criterion in Criterion:
            assert np.all(results[criterion] == SENTINEL)
        assert np.all(results.shear_ratio == SENTINEL)

    def test_report_order(self):
        assert list(CriterionResults.allocate(1).to_dict()) == [
            "MSTRS", "MSTRN", "TSAIH", "TSAIW", "TSAIWTT",
            "AZZIT", "HSNFTCRT", "HSNFCCRT", "HSNMTCRT", "HSNMCCRT",
        ]

    def test_maximum_over_history(self, stress_only):
        stress = StressField.from_flat(1, 3, s11=[300.0, 1200.0, -600.0])
        results = CriterionResults.allocate(1)
        evaluator = LocationEvaluator(
            stress_only, classify_availability(stress_only), results, EvaluationContext()
        )
        evaluator.evaluate(0, stress.location(0))

        assert np.isclose(results.mstrs[0], 0.8)

    def test_only_target_location_written(self, stress_only):
        stress = StressField.from_flat(3, 1, s11=[100.0, 200.0, 300.0])
        results = CriterionResults.allocate(3)
        evaluator = LocationEvaluator(
            stress_only, classify_availability(stress_only), results, EvaluationContext()
        )
        evaluator.evaluate(1, stress.location(1))

        assert results.mstrs[0] == SENTINEL
        assert results.mstrs[2] == SENTINEL
        assert np.isclose(results.mstrs[1], 200.0 / 1500.0)

    def test_degraded_strain_path(self, elastic_strain):
        material = MaterialParameters(strain=elastic_strain)
        availability = classify_availability(material)
        assert availability.strain is FamilyState.DEGRADED

        # G = 100e3 / 2.5 = 40e3
        stress = StressField.from_flat(1, 1, s11=[500.0], s12=[200.0])
        results = CriterionResults.allocate(1)
        evaluator = LocationEvaluator(material, availability, results, EvaluationContext())

        e11, e22, e12 = evaluator.strains(stress.location(0))
        assert np.isclose(e11[0], 0.005)
        assert e22[0] == 0.0
        assert np.isclose(e12[0], 0.005)

        evaluator.evaluate(0, stress.location(0))
        assert np.isclose(results.mstrn[0], 0.5)

    def test_full_strain_path_keeps_trailing_samples(self):
        strain = StrainLimits(
            Xet=0.01, Xec=0.01, Yet=0.01, Yec=0.01, Se=0.01, E=100e3, k_prime=1e3, n_prime=0.1
        )
        material = MaterialParameters(strain=strain)
        availability = classify_availability(material)
        assert availability.strain is FamilyState.FULL

        inverter = PaddedInverter()
        stress = StressField.from_flat(1, 2, s11=[200.0, 500.0])
        results = CriterionResults.allocate(1)
        evaluator = LocationEvaluator(
            material, availability, results, EvaluationContext(inverter=inverter)
        )
        evaluator.evaluate(0, stress.location(0))

        assert inverter.calls == 3
        assert np.isclose(results.mstrn[0], 0.5)

    def test_ramberg_osgood_strain_path(self):
        strain = StrainLimits(
            Xet=0.01, Xec=0.01, Yet=0.01, Yec=0.01, Se=0.01, E=200e3, k_prime=1e3, n_prime=0.1
        )
        material = MaterialParameters(strain=strain)
        stress = StressField.from_flat(1, 2, s11=[100.0, 200.0])
        evaluator = LocationEvaluator(
            material, classify_availability(material), CriterionResults.allocate(1),
            EvaluationContext(),
        )

        e11, e22, e12 = evaluator.strains(stress.location(0))
        assert e11.shape == (2,)
        assert np.isclose(e11[1], 200.0 / 200e3 + 0.2**10)
        assert np.all(e22 == 0.0)

    def test_hashin_modes(self, hashin_only):
        stress = StressField.from_flat(1, 2, s11=[750.0, -1500.0], s22=[-246.0, 20.0])
        results = CriterionResults.allocate(1)
        evaluator = LocationEvaluator(
            hashin_only, classify_availability(hashin_only), results, EvaluationContext()
        )
        evaluator.evaluate(0, stress.location(0))

        assert np.isclose(results.hsnftcrt[0], 0.25)
        assert np.isclose(results.hsnfccrt[0], 1.0)
        assert np.isclose(results.hsnmtcrt[0], 0.25)
        assert np.isclose(results.hsnmccrt[0], 1.0)
        assert results.mstrs[0] == SENTINEL

    def test_shear_ratio_skips_undefined_samples(self, stress_only):
        stress = StressField.from_flat(1, 3, s12=[0.0, 2.0, 1.0], s23=[0.0, 4.0, 10.0])
        results = CriterionResults.allocate(1)
        evaluator = LocationEvaluator(
            stress_only, classify_availability(stress_only), results, EvaluationContext()
        )
        evaluator.evaluate(0, stress.location(0))

        assert results.shear_ratio[0] == 0.5

    def test_out_of_plane_message(self, stress_only):
        messenger = Messenger()
        stress = StressField.from_flat(1, 3, s11=[1.0, 2.0, 3.0], s13=[0.0, 5.0, 5.0])
        evaluator = LocationEvaluator(
            stress_only,
            classify_availability(stress_only),
            CriterionResults.allocate(1),
            EvaluationContext(messenger=messenger),
        )
        evaluator.evaluate(0, stress.location(0), main_id=17, sub_id=2)

        assert messenger.count(MessageCode.OUT_OF_PLANE_STRESS) == 1
        assert "17.2" in messenger.last().text


# =============================================================================
# Tests for Aggregation
# =============================================================================

class TestAggregation:
    """Tests for failure counting and notification."""

    def test_sanitize_shear_ratio(self):
        ratio = sanitize_shear_ratio(np.array([0.5, np.inf, -np.inf, np.nan, -1.0]))
        assert np.array_equal(ratio, [0.5, 0.0, 0.0, 0.0, -1.0])

    def test_threshold_is_inclusive(self):
        results = CriterionResults.allocate(3)
        results.mstrs[:] = [0.999, 1.0, 1.5]

        counts = count_failures(results)
        assert counts[Criterion.MAX_STRESS] == 2
        assert counts["MSTRS"] == 2

    def test_sentinels_never_fail(self):
        counts = count_failures(CriterionResults.allocate(5))

        assert counts.total == 0
        assert not counts.any_failed

    def test_through_thickness_threshold(self):
        results = CriterionResults.allocate(4)
        results.tsaiwtt[:] = [0.8, 0.8, 0.8, SENTINEL]
        results.shear_ratio[:] = [0.5, np.inf, np.nan, SENTINEL]

        report = aggregate_results(
            results, np.arange(1, 5), np.ones(4), frozenset(), Messenger()
        )

        assert np.array_equal(report.results.shear_ratio, [0.5, 0.0, 0.0, SENTINEL])
        # Thresholds: 0.75, 1, 1 and 0 (sentinel k = -1)
        assert report.counts[Criterion.TSAI_WU_TT] == 1

    def test_failure_messages_in_code_order(self):
        results = CriterionResults.allocate(2)
        results.hsnmccrt[:] = [2.0, 2.0]
        results.mstrn[:] = [0.5, 1.0]
        results.mstrs[:] = [1.0, 0.0]
        messenger = Messenger()

        aggregate_results(results, np.arange(1, 3), np.ones(2), frozenset(), messenger)

        assert messenger.codes() == [
            MessageCode.MAX_STRESS_FAILED,
            MessageCode.MAX_STRAIN_FAILED,
            MessageCode.HASHIN_MATRIX_COMPRESSION_FAILED,
        ]
        assert "2 location(s)" in messenger.last().text

    def test_every_criterion_has_a_code(self):
        assert set(FAILURE_CODES) == set(Criterion)
        assert sorted(int(c) for c in FAILURE_CODES.values()) == list(range(290, 300))


# =============================================================================
# Tests for Complete Runs
# =============================================================================

class TestCompositeFailureSolver:
    """End-to-end runs over small stress fields."""

    def test_tensile_strength_fails_max_stress(self, full_material, context):
        stress = StressField.from_flat(1, 1, s11=[1500.0])
        _, report = run_solver(stress, full_material, context=context)

        assert report.results.mstrs[0] == 1.0
        assert report.counts[Criterion.MAX_STRESS] == 1
        assert MessageCode.MAX_STRESS_FAILED in context.messenger.codes()
        assert report.evaluated == frozenset(TheoryFamily)

    def test_missing_strength_leaves_sentinels(self, stress_limits, hashin_strengths, context):
        limits = StressLimits(**{**stress_limits.to_dict(), "Xc": None})
        material = MaterialParameters(stress=limits, hashin=hashin_strengths)
        stress = StressField.from_flat(2, 1, s11=[100.0, 200.0])

        _, report = run_solver(stress, material, context=context)

        for criterion in (
            Criterion.MAX_STRESS, Criterion.TSAI_HILL, Criterion.TSAI_WU, Criterion.AZZI_TSAI_HILL,
        ):
            assert np.all(report.results[criterion] == SENTINEL)
        assert np.all(report.results.mstrn == SENTINEL)
        assert np.all(report.results.hsnftcrt >= 0.0)
        assert np.all(report.results.tsaiwtt >= 0.0)

    def test_out_of_plane_message_once_per_location(self, stress_only, context):
        stress = StressField.from_flat(
            2, 3, s11=[10.0] * 6, s33=[0.0, 0.0, 0.0, 1.0, 2.0, 3.0]
        )
        _, report = run_solver(stress, stress_only, context=context, main_ids=[11, 12])

        assert context.messenger.count(MessageCode.OUT_OF_PLANE_STRESS) == 1
        assert "ID 12.1" in context.messenger.last(MessageCode.OUT_OF_PLANE_STRESS).text
        assert np.all(report.results.mstrs >= 0.0)

    def test_regions_use_their_own_material(self, stress_only, hashin_only, context):
        stress = StressField.from_flat(5, 1, s11=[100.0, 200.0, 300.0, 400.0, 500.0])
        _, report = run_solver(
            stress,
            regions=[RegionDefinition("skin", "s", 2), RegionDefinition("spar", "h", 3)],
            library={"s": stress_only, "h": hashin_only},
            context=context,
        )
        results = report.results

        assert np.all(results.mstrs[:2] >= 0.0)
        assert np.all(results.hsnftcrt[:2] == SENTINEL)
        assert np.all(results.mstrs[2:] == SENTINEL)
        assert np.allclose(results.hsnftcrt[2:], (np.array([300.0, 400.0, 500.0]) / 1500.0) ** 2)

    def test_disabled_region_is_skipped(self, stress_only, context):
        empty = MaterialParameters(name="empty")
        stress = StressField.from_flat(3, 1, s11=[100.0] * 3, s33=[1.0] * 3)
        _, report = run_solver(
            stress,
            regions=[RegionDefinition("a", "empty", 2), RegionDefinition("b", "s", 1)],
            library={"empty": empty, "s": stress_only},
            context=context,
        )

        assert np.all(report.results.mstrs[:2] == SENTINEL)
        assert report.results.mstrs[2] >= 0.0
        # Skipped locations are never inspected
        assert context.messenger.count(MessageCode.OUT_OF_PLANE_STRESS) == 1

    def test_nothing_evaluated(self, tmp_path, context):
        stress = StressField.from_flat(2, 1, s11=[1.0, 2.0])
        solver, report = run_solver(
            stress, MaterialParameters(), context=context, write_report=True
        )

        assert not report.any_evaluated
        assert solver.report_path is None
        assert context.messenger.codes() == [MessageCode.NOTHING_EVALUATED]
        assert not (tmp_path / "Data Files").exists()

    def test_report_written(self, stress_only, context, tmp_path):
        stress = StressField.from_flat(2, 1, s11=[10.0, 20.0])
        solver, _ = run_solver(stress, stress_only, context=context, write_report=True)

        assert solver.report_path == tmp_path / "Data Files" / "composite-criteria.dat"
        assert solver.report_path.exists()
        assert context.messenger.codes() == [MessageCode.NO_FAILURES, MessageCode.REPORT_WRITTEN]

    def test_deterministic(self, full_material):
        rng = np.random.default_rng(3)
        components = {name: rng.normal(0.0, 200.0, 20) for name in ("s11", "s22", "s12", "s23")}
        stress = StressField.from_flat(4, 5, **components)

        _, first = run_solver(stress, full_material)
        _, second = run_solver(stress, full_material)

        for name, values in first.results.to_dict().items():
            assert np.array_equal(values, second.results[name])
        assert np.array_equal(first.results.shear_ratio, second.results.shear_ratio)
        assert first.counts == second.counts

    def test_smaller_sample_leaves_results_unchanged(self, full_material):
        short = StressField.from_flat(1, 2, s11=[400.0, -200.0], s22=[10.0, -50.0], s12=[5.0, 20.0])
        longer = StressField.from_flat(
            1, 3, s11=[400.0, -200.0, 50.0], s22=[10.0, -50.0, 1.0], s12=[5.0, 20.0, 1.0]
        )

        _, before = run_solver(short, full_material)
        _, after = run_solver(longer, full_material)

        for name, values in before.results.to_dict().items():
            assert np.array_equal(after.results[name], values)

    def test_location_count_mismatch(self, stress_only):
        stress = StressField.from_flat(2, 1)
        with pytest.raises(ValueError):
            CompositeFailureSolver(stress, GroupResolver(3, default_material=stress_only))
