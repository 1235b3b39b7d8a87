"""
Per-Location Composite Failure Evaluation.

For every location, the enabled failure criteria are computed at each
loading sample and reduced to the critical instant (the maximum over the
loading history). Results are written into a :class:`CriterionResults`
container at the location's global index.

Strain Path
-----------
The strain family converts stresses to strains in one of two ways:

- FULL: the cyclic stress-strain curve, through a
  :class:`~composite_criteria.constitutive.cyclic.StressStrainInverter`.
  The inverter may return more samples than it is given; only the
  trailing L samples are kept.
- DEGRADED: linear elasticity, ε = σ/E and γ = τ/G with G = E/(2(1+ν)).
"""

import logging
from dataclasses import dataclass, fields
from typing import Dict, Optional

import numpy as np

from composite_criteria.constitutive.availability import FamilyAvailability, FamilyState
from composite_criteria.constitutive.coefficients import (
    ThroughThicknessCoefficients,
    TsaiWuCoefficients,
)
from composite_criteria.constitutive.failure import (
    Criterion,
    azzi_tsai_hill_index,
    hashin_indices,
    interlaminar_shear_ratio,
    max_strain_index,
    max_stress_index,
    tsai_hill_index,
)
from composite_criteria.core.material import MaterialParameters
from composite_criteria.core.stress import LocationStress
from composite_criteria.postprocess.messages import MessageCode
from composite_criteria.solvers.context import EvaluationContext

logger = logging.getLogger(__name__)

SENTINEL = -1.0

_CRITERION_FIELDS = {
    Criterion.MAX_STRESS: "mstrs",
    Criterion.MAX_STRAIN: "mstrn",
    Criterion.TSAI_HILL: "tsaih",
    Criterion.TSAI_WU: "tsaiw",
    Criterion.TSAI_WU_TT: "tsaiwtt",
    Criterion.AZZI_TSAI_HILL: "azzit",
    Criterion.HASHIN_FIBER_TENSION: "hsnftcrt",
    Criterion.HASHIN_FIBER_COMPRESSION: "hsnfccrt",
    Criterion.HASHIN_MATRIX_TENSION: "hsnmtcrt",
    Criterion.HASHIN_MATRIX_COMPRESSION: "hsnmccrt",
}


@dataclass
class CriterionResults:
    """
    Container for the reduced criterion values of all locations.

    Every array has one entry per location and starts at -1, meaning the
    criterion was not evaluated at that location.

    Attributes
    ----------
    mstrs, mstrn : np.ndarray
        Maximum stress and maximum strain.
    tsaih, tsaiw, tsaiwtt, azzit : np.ndarray
        Tsai-Hill, Tsai-Wu, through-thickness Tsai-Wu and Azzi-Tsai-Hill.
    hsnftcrt, hsnfccrt, hsnmtcrt, hsnmccrt : np.ndarray
        Hashin fiber tension, fiber compression, matrix tension and
        matrix compression.
    shear_ratio : np.ndarray
        Interlaminar shear ratio k = max(τ12/τ23).
    """

    mstrs: np.ndarray
    mstrn: np.ndarray
    tsaih: np.ndarray
    tsaiw: np.ndarray
    tsaiwtt: np.ndarray
    azzit: np.ndarray
    hsnftcrt: np.ndarray
    hsnfccrt: np.ndarray
    hsnmtcrt: np.ndarray
    hsnmccrt: np.ndarray
    shear_ratio: np.ndarray

    @classmethod
    def allocate(cls, n_locations: int) -> "CriterionResults":
        """Create results for ``n_locations`` locations, all set to -1."""
        return cls(**{f.name: np.full(n_locations, SENTINEL) for f in fields(cls)})

    def __len__(self) -> int:
        return self.mstrs.shape[0]

    def __getitem__(self, criterion: Criterion) -> np.ndarray:
        return getattr(self, _CRITERION_FIELDS[Criterion(criterion)])

    def to_dict(self) -> Dict[str, np.ndarray]:
        """Criterion values keyed by report column name, in report order."""
        return {criterion.value: self[criterion] for criterion in Criterion}


class LocationEvaluator:
    """
    Evaluates the enabled criteria of one region, location by location.

    The Tsai-Wu coefficients are derived once, on construction; the
    in-plane and through-thickness sets are held separately.

    Parameters
    ----------
    material : MaterialParameters
        Material of the region.
    availability : FamilyAvailability
        Readiness of each theory family for ``material``.
    results : CriterionResults
        Output container, shared by all regions.
    context : EvaluationContext
        Run context (messenger and stress-strain inverter).
    """

    def __init__(
        self,
        material: MaterialParameters,
        availability: FamilyAvailability,
        results: CriterionResults,
        context: EvaluationContext,
    ):
        self.material = material
        self.availability = availability
        self.results = results
        self.context = context

        self.tsai_wu: Optional[TsaiWuCoefficients] = None
        self.through_thickness: Optional[ThroughThicknessCoefficients] = None

        if availability.general_stress.enabled:
            self.tsai_wu = TsaiWuCoefficients.from_limits(material.stress)
            logger.debug("Tsai-Wu coefficients for '%s': %s", material.name, self.tsai_wu)
        if availability.through_thickness.enabled:
            self.through_thickness = ThroughThicknessCoefficients.from_limits(material.stress)
            logger.debug(
                "Through-thickness Tsai-Wu coefficients for '%s': %s",
                material.name,
                self.through_thickness,
            )

    def evaluate(self, location: int, stress: LocationStress, main_id=None, sub_id=None) -> None:
        """
        Evaluate all enabled criteria at one location.

        Parameters
        ----------
        location : int
            Global location index (0-based) in ``results``.
        stress : LocationStress
            Stress history of the location.
        main_id, sub_id : optional
            Identifiers quoted in the out-of-plane stress message.
        """
        if stress.has_out_of_plane:
            self.context.messenger.write(
                MessageCode.OUT_OF_PLANE_STRESS,
                location=location + 1,
                main_id=_format_id(main_id, location + 1),
                sub_id=_format_id(sub_id, 1),
            )

        if self.availability.general_stress.enabled:
            self._evaluate_stress(location, stress)
        if self.availability.through_thickness.enabled:
            self._evaluate_through_thickness(location, stress)
        if self.availability.strain.enabled:
            self._evaluate_strain(location, stress)
        if self.availability.hashin.enabled:
            self._evaluate_hashin(location, stress)

    def _evaluate_stress(self, location: int, stress: LocationStress) -> None:
        limits = self.material.stress
        s11, s22, s12 = stress.s11, stress.s22, stress.s12

        self.results.mstrs[location] = np.max(max_stress_index(s11, s22, s12, limits))
        self.results.tsaih[location] = np.max(tsai_hill_index(s11, s22, s12, limits))
        self.results.tsaiw[location] = np.max(self.tsai_wu.index(s11, s22, s12))
        self.results.azzit[location] = np.max(azzi_tsai_hill_index(s11, s22, s12, limits))

    def _evaluate_through_thickness(self, location: int, stress: LocationStress) -> None:
        # fmax skips the nan samples of 0/0 while keeping ±inf
        ratio = interlaminar_shear_ratio(stress.s12, stress.s23)
        self.results.shear_ratio[location] = np.fmax.reduce(ratio)
        self.results.tsaiwtt[location] = np.max(self.through_thickness.index(stress.s22, stress.s33))

    def _evaluate_strain(self, location: int, stress: LocationStress) -> None:
        e11, e22, e12 = self.strains(stress)
        self.results.mstrn[location] = np.max(max_strain_index(e11, e22, e12, self.material.strain))

    def _evaluate_hashin(self, location: int, stress: LocationStress) -> None:
        indices = hashin_indices(stress.s11, stress.s22, stress.s12, self.material.hashin)

        self.results.hsnftcrt[location] = np.max(indices.fiber_tension)
        self.results.hsnfccrt[location] = np.max(indices.fiber_compression)
        self.results.hsnmtcrt[location] = np.max(indices.matrix_tension)
        self.results.hsnmccrt[location] = np.max(indices.matrix_compression)

    def strains(self, stress: LocationStress):
        """
        Strain histories (ε11, ε22, γ12) of a location.

        Returns
        -------
        tuple of np.ndarray
            Three arrays with the same length as the stress history.
        """
        strain = self.material.strain
        n_samples = stress.s11.shape[0]

        if self.availability.strain is FamilyState.FULL:
            inverter = self.context.inverter
            converted = []
            for component in (stress.s11, stress.s22, stress.s12):
                values = np.asarray(
                    inverter.invert(component, strain.E, strain.k_prime, strain.n_prime)
                )
                converted.append(values[values.shape[0] - n_samples :])
            return tuple(converted)

        return (
            stress.s11 / strain.E,
            stress.s22 / strain.E,
            stress.s12 / self.availability.shear_modulus,
        )


def _format_id(value, default) -> str:
    if value is None:
        value = default
    return f"{float(value):.0f}"
