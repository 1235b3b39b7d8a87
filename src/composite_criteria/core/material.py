"""
Material Parameter Records for Composite Failure Analysis.

This module defines the strength, strain and Hashin property sets used by
the composite failure criteria. Every property is optional: an absent value
is stored as ``None`` and the failure theories that need it are disabled
for the region using the material.

The main classes are:
- StressLimits: Fail-stress properties (maximum stress, Tsai-Hill, Tsai-Wu)
- StrainLimits: Fail-strain properties and the cyclic stress-strain curve
- HashinStrengths: Hashin fiber/matrix strengths
- MaterialParameters: The three sets combined under one material name

Sign Convention
---------------
Compressive fail-stress and fail-strain limits are stored as negative
values; a positive magnitude given on input is negated. Hashin strengths
are stored as positive magnitudes.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Tuple


def _signed(value: Optional[float], negative: bool) -> Optional[float]:
    if value is None:
        return None
    value = float(value)
    return -abs(value) if negative else abs(value)


class _PresenceMixin:
    """Structural presence checks shared by the property records."""

    def is_present(self, name: str) -> bool:
        """Return True if property ``name`` has a value."""
        return getattr(self, name) is not None

    def missing(self, *names: str) -> Tuple[str, ...]:
        """Return the subset of ``names`` without a value, in order."""
        return tuple(name for name in names if getattr(self, name) is None)

    def has_all(self, *names: str) -> bool:
        """Return True if every property in ``names`` has a value."""
        return not self.missing(*names)

    def _check_nonzero(self, *names: str) -> None:
        for name in names:
            value = getattr(self, name)
            if value is not None and value == 0.0:
                raise ValueError(f"{type(self).__name__}.{name} must be non-zero")

    def to_dict(self) -> Dict[str, float]:
        """Present properties as a plain dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self) if self.is_present(f.name)}


@dataclass(frozen=True)
class StressLimits(_PresenceMixin):
    """
    Fail-stress properties of a composite lamina.

    Parameters
    ----------
    Xt, Xc : float, optional
        Tensile and compressive strength in the fiber direction (1-direction).
    Yt, Yc : float, optional
        Tensile and compressive strength transverse to the fibers (2-direction).
    Zt, Zc : float, optional
        Tensile and compressive through-thickness strength (3-direction).
    S : float, optional
        In-plane shear strength.
    f12, f23 : float, optional
        Tsai-Wu interaction ratios for the 1-2 and 2-3 planes. Used only
        when the matching biaxial limit is absent; an absent ratio counts
        as 0.
    B12, B23 : float, optional
        Equibiaxial failure stress for the 1-2 and 2-3 planes.
    """

    Xt: Optional[float] = None
    Xc: Optional[float] = None
    Yt: Optional[float] = None
    Yc: Optional[float] = None
    Zt: Optional[float] = None
    Zc: Optional[float] = None
    S: Optional[float] = None
    f12: Optional[float] = None
    f23: Optional[float] = None
    B12: Optional[float] = None
    B23: Optional[float] = None

    def __post_init__(self):
        for name in ("Xt", "Yt", "Zt", "S"):
            object.__setattr__(self, name, _signed(getattr(self, name), negative=False))
        for name in ("Xc", "Yc", "Zc"):
            object.__setattr__(self, name, _signed(getattr(self, name), negative=True))
        for name in ("f12", "f23", "B12", "B23"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, float(value))
        self._check_nonzero("Xt", "Xc", "Yt", "Yc", "Zt", "Zc", "S", "B12", "B23")


@dataclass(frozen=True)
class StrainLimits(_PresenceMixin):
    """
    Fail-strain properties and elastic/cyclic constants of a lamina.

    Parameters
    ----------
    Xet, Xec : float, optional
        Tensile and compressive failure strain in the fiber direction.
    Yet, Yec : float, optional
        Tensile and compressive failure strain transverse to the fibers.
    Se : float, optional
        In-plane shear failure strain.
    E : float, optional
        Young's modulus.
    nu : float, optional
        Poisson's ratio.
    k_prime : float, optional
        Cyclic strength coefficient K' of the Ramberg-Osgood curve.
    n_prime : float, optional
        Cyclic strain hardening exponent n' of the Ramberg-Osgood curve.
    """

    Xet: Optional[float] = None
    Xec: Optional[float] = None
    Yet: Optional[float] = None
    Yec: Optional[float] = None
    Se: Optional[float] = None
    E: Optional[float] = None
    nu: Optional[float] = None
    k_prime: Optional[float] = None
    n_prime: Optional[float] = None

    def __post_init__(self):
        for name in ("Xet", "Yet", "Se"):
            object.__setattr__(self, name, _signed(getattr(self, name), negative=False))
        for name in ("Xec", "Yec"):
            object.__setattr__(self, name, _signed(getattr(self, name), negative=True))
        for name in ("E", "nu", "k_prime", "n_prime"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, float(value))
        self._check_nonzero("Xet", "Xec", "Yet", "Yec", "Se", "E", "k_prime", "n_prime")
        if self.E is not None and self.E < 0:
            raise ValueError(f"Young's modulus must be positive: {self.E}")
        if self.nu is not None and self.nu <= -1.0:
            raise ValueError(f"Poisson's ratio must be greater than -1: {self.nu}")

    @property
    def has_cyclic_curve(self) -> bool:
        """True when the Ramberg-Osgood constants E, K' and n' are all defined."""
        return self.has_all("E", "k_prime", "n_prime")

    @property
    def shear_modulus(self) -> Optional[float]:
        """Isotropic estimate G = E / (2(1 + nu)), or None if E or nu is absent."""
        if not self.has_all("E", "nu"):
            return None
        return self.E / (2.0 * (1.0 + self.nu))


@dataclass(frozen=True)
class HashinStrengths(_PresenceMixin):
    """
    Strength properties for the Hashin criterion.

    Parameters
    ----------
    Xt, Xc : float, optional
        Longitudinal tensile and compressive strength.
    Yt, Yc : float, optional
        Transverse tensile and compressive strength.
    SL : float, optional
        Longitudinal shear strength.
    ST : float, optional
        Transverse shear strength.
    alpha : float
        Shear contribution to the fiber tension mode. 1.0 gives the
        Hashin (1980) form, 0.0 the Hashin-Rotem (1973) form.
    """

    Xt: Optional[float] = None
    Xc: Optional[float] = None
    Yt: Optional[float] = None
    Yc: Optional[float] = None
    SL: Optional[float] = None
    ST: Optional[float] = None
    alpha: float = 1.0

    def __post_init__(self):
        for name in ("Xt", "Xc", "Yt", "Yc", "SL", "ST"):
            object.__setattr__(self, name, _signed(getattr(self, name), negative=False))
        object.__setattr__(self, "alpha", 1.0 if self.alpha is None else float(self.alpha))
        self._check_nonzero("Xt", "Xc", "Yt", "Yc", "SL", "ST")


@dataclass(frozen=True)
class MaterialParameters:
    """
    Complete failure property set of one material.

    Parameters
    ----------
    name : str
        The name of the material.
    stress : StressLimits
        Fail-stress properties.
    strain : StrainLimits
        Fail-strain properties.
    hashin : HashinStrengths
        Hashin strengths.
    """

    name: str = "Material"
    stress: StressLimits = field(default_factory=StressLimits)
    strain: StrainLimits = field(default_factory=StrainLimits)
    hashin: HashinStrengths = field(default_factory=HashinStrengths)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MaterialParameters":
        """Build a material from the ``materials`` entry of a job file.

        Recognized keys are ``name``, ``fail_stress``, ``fail_strain`` and
        ``hashin``. In ``fail_strain`` the cyclic constants may be given as
        ``kp``/``np`` or ``k_prime``/``n_prime``.
        """
        strain_data = dict(data.get("fail_strain") or {})
        if "kp" in strain_data:
            strain_data["k_prime"] = strain_data.pop("kp")
        if "np" in strain_data:
            strain_data["n_prime"] = strain_data.pop("np")

        try:
            return cls(
                name=data.get("name", "Material"),
                stress=StressLimits(**(data.get("fail_stress") or {})),
                strain=StrainLimits(**strain_data),
                hashin=HashinStrengths(**(data.get("hashin") or {})),
            )
        except TypeError as e:
            raise ValueError(f"Invalid property in material '{data.get('name')}': {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the dictionary layout accepted by :meth:`from_dict`."""
        result: Dict[str, Any] = {"name": self.name}
        if self.stress.to_dict():
            result["fail_stress"] = self.stress.to_dict()
        strain = self.strain.to_dict()
        if strain:
            if "k_prime" in strain:
                strain["kp"] = strain.pop("k_prime")
            if "n_prime" in strain:
                strain["np"] = strain.pop("n_prime")
            result["fail_strain"] = strain
        hashin = self.hashin.to_dict()
        if set(hashin) - {"alpha"}:
            result["hashin"] = hashin
        return result
