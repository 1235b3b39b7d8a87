"""
Failure Criteria for Composite Materials.

This module implements the failure criteria evaluated for fiber-reinforced
composite laminae:
- Maximum stress and maximum strain criteria (no interaction)
- Tsai-Hill and Azzi-Tsai-Hill criteria (quadratic, strength ratios)
- Tsai-Wu criterion, in-plane and through-thickness (quadratic interaction)
- Hashin criterion (mode-specific failure)

Every function works on whole stress histories: the arguments are arrays
with one entry per loading sample and the result holds one failure index
per sample. Compressive limits are signed (negative), so a ratio such as
σ1/X is positive in both tension and compression.

References
----------
- Azzi, V.D. and Tsai, S.W. (1965). "Anisotropic Strength of Composites."
  Experimental Mechanics, 5, 283-288.
- Tsai, S.W. and Wu, E.M. (1971). "A General Theory of Strength for
  Anisotropic Materials." J. Composite Materials, 5, 58-80.
- Hashin, Z. (1980). "Failure Criteria for Unidirectional Fiber Composites."
  J. Applied Mechanics, 47, 329-334.
"""

from enum import Enum
from typing import NamedTuple, Optional

import numpy as np

from composite_criteria.core.material import HashinStrengths, StrainLimits, StressLimits


class Criterion(str, Enum):
    """Failure criteria reported for each location, in report column order."""

    MAX_STRESS = "MSTRS"
    MAX_STRAIN = "MSTRN"
    TSAI_HILL = "TSAIH"
    TSAI_WU = "TSAIW"
    TSAI_WU_TT = "TSAIWTT"
    AZZI_TSAI_HILL = "AZZIT"
    HASHIN_FIBER_TENSION = "HSNFTCRT"
    HASHIN_FIBER_COMPRESSION = "HSNFCCRT"
    HASHIN_MATRIX_TENSION = "HSNMTCRT"
    HASHIN_MATRIX_COMPRESSION = "HSNMCCRT"


class HashinIndices(NamedTuple):
    """Per-sample Hashin indices; a mode is 0 where its branch is inactive."""

    fiber_tension: np.ndarray
    fiber_compression: np.ndarray
    matrix_tension: np.ndarray
    matrix_compression: np.ndarray


def select_by_sign(values: np.ndarray, tension: float, compression: float) -> np.ndarray:
    """
    Pick the tensile or compressive limit at each sample.

    Parameters
    ----------
    values : np.ndarray
        Normal stress (or strain) history.
    tension, compression : float
        Limits used where ``values >= 0`` and ``values < 0`` respectively.

    Returns
    -------
    np.ndarray
        Limit at each sample.
    """
    return np.where(np.asarray(values) >= 0.0, tension, compression)


def _shear_ratio(s12: np.ndarray, shear_limit: Optional[float]) -> np.ndarray:
    if shear_limit is None:
        return np.zeros_like(s12, dtype=float)
    return s12 / shear_limit


def max_stress_index(s11, s22, s12, limits: StressLimits) -> np.ndarray:
    """
    Maximum stress criterion.

    FI = max(σ1/X, σ2/Y, |τ12/S|) where X and Y are the tensile or
    compressive strength according to the sign of σ1 and σ2.
    """
    X = select_by_sign(s11, limits.Xt, limits.Xc)
    Y = select_by_sign(s22, limits.Yt, limits.Yc)
    ratios = np.vstack([s11 / X, s22 / Y, np.abs(_shear_ratio(s12, limits.S))])
    return ratios.max(axis=0)


def max_strain_index(e11, e22, e12, limits: StrainLimits) -> np.ndarray:
    """
    Maximum strain criterion.

    FI = max(ε1/Xe, ε2/Ye, |γ12/Se|) with the tensile or compressive failure
    strain selected by the sign of ε1 and ε2.
    """
    Xe = select_by_sign(e11, limits.Xet, limits.Xec)
    Ye = select_by_sign(e22, limits.Yet, limits.Yec)
    ratios = np.vstack([e11 / Xe, e22 / Ye, np.abs(e12 / limits.Se)])
    return ratios.max(axis=0)


def tsai_hill_index(s11, s22, s12, limits: StressLimits) -> np.ndarray:
    """
    Tsai-Hill criterion.

    FI = σ1²/X² - σ1·σ2/X² + σ2²/Y² + τ12²/S²
    """
    X = select_by_sign(s11, limits.Xt, limits.Xc)
    Y = select_by_sign(s22, limits.Yt, limits.Yc)
    return s11**2 / X**2 - (s11 * s22) / X**2 + s22**2 / Y**2 + _shear_ratio(s12, limits.S) ** 2


def azzi_tsai_hill_index(s11, s22, s12, limits: StressLimits) -> np.ndarray:
    """
    Azzi-Tsai-Hill criterion.

    Same as Tsai-Hill with the interaction term taken in absolute value,
    which makes the index independent of the relative sign of σ1 and σ2:

    FI = σ1²/X² - |σ1·σ2|/X² + σ2²/Y² + τ12²/S²
    """
    X = select_by_sign(s11, limits.Xt, limits.Xc)
    Y = select_by_sign(s22, limits.Yt, limits.Yc)
    return (
        s11**2 / X**2
        - np.abs(s11 * s22) / X**2
        + s22**2 / Y**2
        + _shear_ratio(s12, limits.S) ** 2
    )


def interlaminar_shear_ratio(s12, s23) -> np.ndarray:
    """
    Ratio k = τ12/τ23 at each sample.

    Samples with τ23 = 0 give ±inf (or nan when τ12 is also 0); they are
    left as they are and sanitized after reduction.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.asarray(s12, dtype=float) / np.asarray(s23, dtype=float)


def hashin_indices(s11, s22, s12, strengths: HashinStrengths) -> HashinIndices:
    """
    Hashin failure indices for the four failure modes.

    **Fiber Tension (σ1 ≥ 0):**
    (σ1/Xt)² + α(τ12/SL)²

    **Fiber Compression (σ1 < 0):**
    (σ1/Xc)²

    **Matrix Tension (σ2 ≥ 0):**
    (σ2/Yt)² + (τ12/SL)²

    **Matrix Compression (σ2 < 0):**
    (σ2/2ST)² + [(Yc/2ST)² - 1](σ2/Yc) + (τ12/SL)²

    where SL and ST are the longitudinal and transverse shear strengths and
    α weights the shear contribution to fiber tension. With the magnitudes
    Xt, Xc, Yt, Yc, SL, ST all positive, the matrix compression linear term
    is negative for σ2 < 0.

    Returns
    -------
    HashinIndices
        One array per mode; entries where the mode does not apply are 0.
    """
    s11 = np.asarray(s11, dtype=float)
    s22 = np.asarray(s22, dtype=float)
    s12 = np.asarray(s12, dtype=float)

    Xt, Xc = strengths.Xt, strengths.Xc
    Yt, Yc = strengths.Yt, strengths.Yc
    SL, ST = strengths.SL, strengths.ST

    fiber_tension = s11 >= 0.0
    matrix_tension = s22 >= 0.0
    shear = (s12 / SL) ** 2

    ft = np.where(fiber_tension, (s11 / Xt) ** 2 + strengths.alpha * shear, 0.0)
    fc = np.where(fiber_tension, 0.0, (s11 / Xc) ** 2)
    mt = np.where(matrix_tension, (s22 / Yt) ** 2 + shear, 0.0)
    mc = np.where(
        matrix_tension,
        0.0,
        (s22 / (2.0 * ST)) ** 2 + ((Yc / (2.0 * ST)) ** 2 - 1.0) * (s22 / Yc) + shear,
    )

    return HashinIndices(ft, fc, mt, mc)
