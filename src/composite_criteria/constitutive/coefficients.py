"""
Tsai-Wu Strength Tensor Coefficients.

The Tsai-Wu criterion is a quadratic polynomial in the stress components.
For the in-plane (1-2) form:

    F1·σ1 + F2·σ2 + F11·σ1² + F22·σ2² + F66·τ12² + 2F12·σ1·σ2

and for the through-thickness (2-3) form:

    F2·σ2 + F3·σ3 + F22·σ2² + F33·σ3² + 2F23·σ2·σ3

Compressive strengths are signed (negative), so the linear terms are plain
reciprocal sums and the quadratic terms are negated reciprocal products.

The interaction coefficient is derived from an equibiaxial failure stress
B when one is defined:

    F12 = 1/(2B²)·[1 - (1/Xt + 1/Xc + 1/Yt + 1/Yc)·B + (1/(Xt·Xc) + 1/(Yt·Yc))·B²]

otherwise from an interaction ratio f:

    F12 = f·sqrt(F11·F22)

The in-plane and through-thickness sets are kept in separate records:
although both carry an ``F2`` and an ``F22``, they are never shared.

References
----------
- Tsai, S.W. and Wu, E.M. (1971). "A General Theory of Strength for
  Anisotropic Materials." J. Composite Materials, 5, 58-80.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from composite_criteria.core.material import StressLimits


def _interaction(
    t1: float,
    c1: float,
    t2: float,
    c2: float,
    biaxial: Optional[float],
    ratio: Optional[float],
    f11: float,
    f22: float,
) -> float:
    if biaxial is not None:
        linear = 1.0 / t1 + 1.0 / c1 + 1.0 / t2 + 1.0 / c2
        quadratic = 1.0 / (t1 * c1) + 1.0 / (t2 * c2)
        return (1.0 / (2.0 * biaxial**2)) * (1.0 - linear * biaxial + quadratic * biaxial**2)
    return (ratio or 0.0) * np.sqrt(f11 * f22)


@dataclass(frozen=True)
class TsaiWuCoefficients:
    """
    In-plane Tsai-Wu coefficients.

    Attributes
    ----------
    F1, F2 : float
        Linear terms.
    F11, F22 : float
        Quadratic normal terms.
    F66 : float
        Quadratic shear term; 0 when no shear strength is defined.
    F12 : float
        Normal interaction term.
    """

    F1: float
    F2: float
    F11: float
    F22: float
    F66: float
    F12: float

    @classmethod
    def from_limits(cls, limits: StressLimits) -> "TsaiWuCoefficients":
        """Derive the coefficients from Xt, Xc, Yt, Yc, S and B12 or f12."""
        Xt, Xc, Yt, Yc = limits.Xt, limits.Xc, limits.Yt, limits.Yc

        F1 = 1.0 / Xt + 1.0 / Xc
        F2 = 1.0 / Yt + 1.0 / Yc
        F11 = -(1.0 / (Xt * Xc))
        F22 = -(1.0 / (Yt * Yc))
        F66 = 1.0 / limits.S**2 if limits.S is not None else 0.0
        F12 = _interaction(Xt, Xc, Yt, Yc, limits.B12, limits.f12, F11, F22)

        return cls(F1=F1, F2=F2, F11=F11, F22=F22, F66=F66, F12=F12)

    def index(self, s11, s22, s12):
        """Failure index at each sample."""
        return (
            self.F1 * s11
            + self.F2 * s22
            + self.F11 * s11**2
            + self.F22 * s22**2
            + self.F66 * s12**2
            + 2.0 * self.F12 * s11 * s22
        )


@dataclass(frozen=True)
class ThroughThicknessCoefficients:
    """
    Through-thickness (2-3 plane) Tsai-Wu coefficients.

    Attributes
    ----------
    F2, F3 : float
        Linear terms.
    F22, F33 : float
        Quadratic normal terms.
    F23 : float
        Normal interaction term.
    """

    F2: float
    F3: float
    F22: float
    F33: float
    F23: float

    @classmethod
    def from_limits(cls, limits: StressLimits) -> "ThroughThicknessCoefficients":
        """Derive the coefficients from Yt, Yc, Zt, Zc and B23 or f23."""
        Yt, Yc, Zt, Zc = limits.Yt, limits.Yc, limits.Zt, limits.Zc

        F2 = 1.0 / Yt + 1.0 / Yc
        F3 = 1.0 / Zt + 1.0 / Zc
        F22 = -(1.0 / (Yt * Yc))
        F33 = -(1.0 / (Zt * Zc))
        F23 = _interaction(Yt, Yc, Zt, Zc, limits.B23, limits.f23, F22, F33)

        return cls(F2=F2, F3=F3, F22=F22, F33=F33, F23=F23)

    def index(self, s22, s33):
        """Failure index at each sample."""
        return (
            self.F2 * s22
            + self.F3 * s33
            + self.F22 * s22**2
            + self.F33 * s33**2
            + 2.0 * self.F23 * s22 * s33
        )
