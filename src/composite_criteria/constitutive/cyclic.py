"""
Cyclic Stress-Strain Conversion.

Converts stress histories to strain histories with the cyclic
Ramberg-Osgood relation and Masing's hypothesis.

Theory
------
The initial loading branch follows the cyclic stress-strain curve:

    ε = σ/E + (σ/K')^(1/n')

Every later branch starts at the last reversal point (σr, εr) and follows
the hysteresis curve, which is the cyclic curve scaled by two:

    Δε = Δσ/E + 2·(Δσ/2K')^(1/n')

with Δσ = σ - σr and Δε = ε - εr.

References
----------
- Ramberg, W. and Osgood, W.R. (1943). "Description of stress-strain
  curves by three parameters." NACA TN-902.
- Masing, G. (1926). "Eigenspannungen und Verfestigung beim Messing."
"""

from typing import Protocol, Sequence

import numpy as np


class StressStrainInverter(Protocol):
    """
    Maps a stress history to a strain history.

    Implementations may return more samples than they are given (for
    instance when the origin is prepended to the history); callers keep the
    trailing ``len(stress)`` samples.
    """

    def invert(
        self, stress: Sequence[float], modulus: float, k_prime: float, n_prime: float
    ) -> np.ndarray: ...


def monotonic_strain(sigma, modulus: float, k_prime: float, n_prime: float):
    """Total strain on the cyclic stress-strain curve for stress ``sigma``."""
    sigma = np.asarray(sigma, dtype=float)
    return sigma / modulus + np.sign(sigma) * (np.abs(sigma) / k_prime) ** (1.0 / n_prime)


def hysteresis_strain(delta_sigma, modulus: float, k_prime: float, n_prime: float):
    """Strain range on the Masing hysteresis branch for stress range ``delta_sigma``."""
    delta_sigma = np.asarray(delta_sigma, dtype=float)
    return delta_sigma / modulus + 2.0 * np.sign(delta_sigma) * (
        np.abs(delta_sigma) / (2.0 * k_prime)
    ) ** (1.0 / n_prime)


class RambergOsgoodInverter:
    """
    Stress-to-strain conversion with the Ramberg-Osgood curve and Masing branches.

    The history is taken to start from an unloaded state. When its first
    sample is non-zero the origin is prepended, so the returned strain
    history is one sample longer than the input.

    Examples
    --------
    >>> inverter = RambergOsgoodInverter()
    >>> strain = inverter.invert([100.0, -100.0], 200e3, 1000.0, 0.1)
    >>> strain.shape
    (3,)
    """

    def invert(
        self, stress: Sequence[float], modulus: float, k_prime: float, n_prime: float
    ) -> np.ndarray:
        """
        Convert a stress history into a strain history.

        Parameters
        ----------
        stress : sequence of float
            Stress samples in loading order.
        modulus : float
            Young's modulus E.
        k_prime : float
            Cyclic strength coefficient K'.
        n_prime : float
            Cyclic strain hardening exponent n'.

        Returns
        -------
        np.ndarray
            Strain samples; at least as many as ``stress``.
        """
        stress = np.asarray(stress, dtype=float).ravel()
        if stress.size == 0:
            return stress.copy()
        if stress[0] != 0.0:
            stress = np.concatenate(([0.0], stress))

        strain = np.zeros_like(stress)
        ref_stress = 0.0
        ref_strain = 0.0
        on_initial_branch = True
        direction = 0.0

        for i in range(1, stress.size):
            step = np.sign(stress[i] - stress[i - 1])
            if step != 0.0 and direction != 0.0 and step != direction:
                # Reversal at the previous sample
                ref_stress, ref_strain = stress[i - 1], strain[i - 1]
                on_initial_branch = False
            if step != 0.0:
                direction = step

            if on_initial_branch:
                strain[i] = monotonic_strain(stress[i], modulus, k_prime, n_prime)
            else:
                strain[i] = ref_strain + hysteresis_strain(
                    stress[i] - ref_stress, modulus, k_prime, n_prime
                )

        return strain
