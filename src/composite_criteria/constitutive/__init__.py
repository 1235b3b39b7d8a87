"""
Constitutive models package for composite-criteria.

This package contains the failure criteria for composite laminae, the
Tsai-Wu coefficient derivation, theory availability checks and the cyclic
stress-strain conversion.
"""

from composite_criteria.constitutive.availability import (
    FamilyAvailability,
    FamilyState,
    TheoryFamily,
    classify_availability,
)
from composite_criteria.constitutive.coefficients import (
    ThroughThicknessCoefficients,
    TsaiWuCoefficients,
)
from composite_criteria.constitutive.cyclic import RambergOsgoodInverter, StressStrainInverter
from composite_criteria.constitutive.failure import (
    Criterion,
    HashinIndices,
    azzi_tsai_hill_index,
    hashin_indices,
    interlaminar_shear_ratio,
    max_strain_index,
    max_stress_index,
    select_by_sign,
    tsai_hill_index,
)

__all__ = [
    "FamilyAvailability",
    "FamilyState",
    "TheoryFamily",
    "classify_availability",
    "ThroughThicknessCoefficients",
    "TsaiWuCoefficients",
    "RambergOsgoodInverter",
    "StressStrainInverter",
    "Criterion",
    "HashinIndices",
    "azzi_tsai_hill_index",
    "hashin_indices",
    "interlaminar_shear_ratio",
    "max_strain_index",
    "max_stress_index",
    "select_by_sign",
    "tsai_hill_index",
]
