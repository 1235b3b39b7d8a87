"""
Failure Theory Availability.

Decides, from the properties defined for a material, which families of
failure theories can be evaluated:

- General stress family: maximum stress, Tsai-Hill, Tsai-Wu, Azzi-Tsai-Hill
- Through-thickness Tsai-Wu
- Strain family: maximum strain
- Hashin family: fiber/matrix tension/compression modes

Each family is classified independently; missing data in one family never
disables another.
"""

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, Optional

from composite_criteria.core.material import MaterialParameters

logger = logging.getLogger(__name__)

GENERAL_STRESS_PROPERTIES = ("Xt", "Xc", "Yt", "Yc")
THROUGH_THICKNESS_PROPERTIES = ("Yt", "Yc", "Zt", "Zc")
STRAIN_LIMIT_PROPERTIES = ("Xet", "Xec", "Yet", "Yec", "Se")
HASHIN_PROPERTIES = ("Xt", "Xc", "Yt", "Yc", "SL", "ST")


class FamilyState(IntEnum):
    """Readiness of a failure theory family."""

    DISABLED = -1
    DEGRADED = 0  # Strain family only: linear elastic strain estimate
    FULL = 1

    @property
    def enabled(self) -> bool:
        return self is not FamilyState.DISABLED


class TheoryFamily(str, Enum):
    """Groups of failure theories sharing the same material data."""

    GENERAL_STRESS = "general_stress"
    THROUGH_THICKNESS = "through_thickness"
    STRAIN = "strain"
    HASHIN = "hashin"


@dataclass(frozen=True)
class FamilyAvailability:
    """
    Readiness of the four theory families for one material.

    Attributes
    ----------
    general_stress : FamilyState
        Maximum stress, Tsai-Hill, Tsai-Wu and Azzi-Tsai-Hill.
    through_thickness : FamilyState
        Through-thickness Tsai-Wu and the interlaminar shear ratio.
    strain : FamilyState
        Maximum strain. DEGRADED means strains are estimated elastically.
    hashin : FamilyState
        The four Hashin modes.
    shear_modulus : float, optional
        Shear modulus E/(2(1+nu)) used by the DEGRADED strain path.
    """

    general_stress: FamilyState = FamilyState.DISABLED
    through_thickness: FamilyState = FamilyState.DISABLED
    strain: FamilyState = FamilyState.DISABLED
    hashin: FamilyState = FamilyState.DISABLED
    shear_modulus: Optional[float] = None

    @property
    def any_enabled(self) -> bool:
        """False when every family is disabled."""
        return any(state.enabled for state in self.states().values())

    def states(self) -> Dict[TheoryFamily, FamilyState]:
        """Family state keyed by :class:`TheoryFamily`."""
        return {
            TheoryFamily.GENERAL_STRESS: self.general_stress,
            TheoryFamily.THROUGH_THICKNESS: self.through_thickness,
            TheoryFamily.STRAIN: self.strain,
            TheoryFamily.HASHIN: self.hashin,
        }

    def enabled_families(self):
        """Set of families that are not disabled."""
        return {family for family, state in self.states().items() if state.enabled}


def _full_if(condition: bool) -> FamilyState:
    return FamilyState.FULL if condition else FamilyState.DISABLED


def classify_strain_family(material: MaterialParameters) -> FamilyState:
    """
    Classify the strain family.

    The family is disabled when any failure strain is missing, or when
    neither the cyclic curve (E, K', n') nor the elastic constants (E, nu)
    are complete. Without K' or n' the strains are estimated elastically
    (DEGRADED); otherwise the cyclic curve is used (FULL).
    """
    strain = material.strain
    elastic = strain.has_all("E", "nu")
    if (not strain.has_cyclic_curve and not elastic) or strain.missing(*STRAIN_LIMIT_PROPERTIES):
        return FamilyState.DISABLED
    if not strain.has_cyclic_curve:
        return FamilyState.DEGRADED
    return FamilyState.FULL


def classify_availability(material: MaterialParameters) -> FamilyAvailability:
    """
    Classify every theory family for ``material``.

    Parameters
    ----------
    material : MaterialParameters
        Material assigned to the region.

    Returns
    -------
    FamilyAvailability
        Tri-state readiness of each family.
    """
    strain_state = classify_strain_family(material)
    availability = FamilyAvailability(
        general_stress=_full_if(material.stress.has_all(*GENERAL_STRESS_PROPERTIES)),
        through_thickness=_full_if(material.stress.has_all(*THROUGH_THICKNESS_PROPERTIES)),
        strain=strain_state,
        hashin=_full_if(material.hashin.has_all(*HASHIN_PROPERTIES)),
        shear_modulus=(
            material.strain.shear_modulus if strain_state is FamilyState.DEGRADED else None
        ),
    )

    for family, state in availability.states().items():
        logger.debug("Material '%s': %s family %s", material.name, family.value, state.name)

    if availability.general_stress.enabled and not material.stress.is_present("S"):
        logger.warning(
            "Material '%s' has no shear strength; shear terms of the stress criteria are ignored",
            material.name,
        )

    return availability
