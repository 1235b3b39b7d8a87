"""
Core module for composite-criteria.

Provides material records, stress histories and job configuration.
"""

from .config import FailureJobConfig, GroupConfig, JobConfig, StressInputConfig
from .material import HashinStrengths, MaterialParameters, StrainLimits, StressLimits
from .stress import LocationStress, StressField, load_stress_csv

__all__ = [
    "FailureJobConfig",
    "GroupConfig",
    "JobConfig",
    "StressInputConfig",
    "HashinStrengths",
    "MaterialParameters",
    "StrainLimits",
    "StressLimits",
    "LocationStress",
    "StressField",
    "load_stress_csv",
]
