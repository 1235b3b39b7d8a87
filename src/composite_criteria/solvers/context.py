"""
Evaluation context shared by the composite failure components.
"""

from dataclasses import dataclass, field

from composite_criteria.constitutive.cyclic import RambergOsgoodInverter, StressStrainInverter
from composite_criteria.core.config import JobConfig
from composite_criteria.postprocess.messages import Messenger


@dataclass(frozen=True)
class EvaluationContext:
    """
    Read-only run context, built once and passed to every component.

    Parameters
    ----------
    job : JobConfig
        Job name, equivalent load and output directory.
    messenger : Messenger
        Destination of the diagnostic stream.
    inverter : StressStrainInverter
        Stress-to-strain conversion used by the full strain path.
    """

    job: JobConfig = field(default_factory=JobConfig)
    messenger: Messenger = field(default_factory=Messenger)
    inverter: StressStrainInverter = field(default_factory=RambergOsgoodInverter)
