"""
Composite Failure Job Configuration Module.

This module provides a YAML-based configuration system for composite
failure runs, allowing users to define a complete evaluation without
writing Python code.

Example YAML configuration:
    job:
      name: "wing-skin"
      output_directory: "results"
      load_equivalent:
        value: 1.0
        units: "Repeats"

    stress:
      file: "stress.csv"

    materials:
      - name: "T300/5208"
        fail_stress: {Xt: 1500.0, Xc: -1500.0, Yt: 40.0, Yc: -246.0, S: 68.0}

    material: "T300/5208"

    groups:
      - {name: "skin", material: "T300/5208", size: 120}
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np
import yaml

from composite_criteria.core.material import MaterialParameters
from composite_criteria.core.stress import COMPONENTS, StressField, default_ids, load_stress_csv

# =============================================================================
# Configuration Data Classes
# =============================================================================


@dataclass
class JobConfig:
    """Job metadata written to the report header."""

    name: str = "Job"
    output_directory: str = "results"
    load_value: float = 1.0
    load_units: str = "Repeats"

    @property
    def output_path(self) -> Path:
        return Path(self.output_directory)


@dataclass
class StressInputConfig:
    """Source of the stress tensor histories.

    Either ``file`` (a long-format CSV, see
    :func:`~composite_criteria.core.stress.load_stress_csv`) or the inline
    ``n_locations``/``n_samples``/component lists must be given.
    """

    file: Optional[str] = None
    separator: str = ","
    n_locations: Optional[int] = None
    n_samples: int = 1
    components: Dict[str, List[float]] = field(default_factory=dict)
    main_ids: Optional[List[float]] = None
    sub_ids: Optional[List[float]] = None

    def __post_init__(self):
        if self.file is None:
            if self.n_locations is None:
                raise ValueError("Stress input needs either 'file' or inline 'n_locations'")
            if self.n_locations <= 0 or self.n_samples <= 0:
                raise ValueError(
                    f"Stress input sizes must be positive: {self.n_locations} x {self.n_samples}"
                )
            unknown = set(self.components) - set(COMPONENTS)
            if unknown:
                raise ValueError(f"Unknown stress components: {sorted(unknown)}")

    def load(self) -> Tuple[StressField, np.ndarray, np.ndarray]:
        """Load the stress field and the location identifiers."""
        if self.file is not None:
            return load_stress_csv(self.file, separator=self.separator)

        stress_field = StressField.from_flat(self.n_locations, self.n_samples, **self.components)
        main_ids, sub_ids = default_ids(self.n_locations, self.main_ids, self.sub_ids)
        return stress_field, main_ids, sub_ids


@dataclass
class GroupConfig:
    """A contiguous block of locations sharing one material."""

    name: str
    material: str
    size: int

    def __post_init__(self):
        if self.size <= 0:
            raise ValueError(f"Group '{self.name}' must contain at least one location")


@dataclass
class FailureJobConfig:
    """Complete composite failure job configuration."""

    job: JobConfig
    stress: StressInputConfig
    materials: Dict[str, MaterialParameters]
    material: Optional[str] = None
    groups: List[GroupConfig] = field(default_factory=list)

    def __post_init__(self):
        if self.material is None and len(self.materials) == 1:
            self.material = next(iter(self.materials))
        if self.material is not None and self.material not in self.materials:
            raise ValueError(f"Unknown default material: {self.material}")
        for group in self.groups:
            if group.material not in self.materials:
                raise ValueError(f"Group '{group.name}' uses unknown material '{group.material}'")
        if self.material is None and not self.groups:
            raise ValueError("A default material is required when no groups are defined")

    @property
    def default_material(self) -> Optional[MaterialParameters]:
        """Material used when no groups are defined."""
        return self.materials.get(self.material) if self.material else None

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "FailureJobConfig":
        """Load configuration from YAML file.

        Parameters
        ----------
        yaml_path : str or Path
            Path to the YAML configuration file.

        Returns
        -------
        FailureJobConfig
            Validated configuration object.

        Raises
        ------
        FileNotFoundError
            If the YAML file does not exist.
        ValueError
            If the configuration is invalid.
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

        with open(yaml_path, "r") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {yaml_path} does not contain a mapping")

        return cls.from_dict(data, base_path=yaml_path.parent)

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], base_path: Optional[Path] = None
    ) -> "FailureJobConfig":
        """Create configuration from dictionary.

        Parameters
        ----------
        data : dict
            Configuration dictionary.
        base_path : Path, optional
            Base path for resolving relative file paths.

        Returns
        -------
        FailureJobConfig
            Validated configuration object.
        """
        # Parse job metadata
        job_data = data.get("job") or {}
        load_data = job_data.get("load_equivalent") or {}
        output_directory = job_data.get("output_directory", "results")
        if base_path and not Path(output_directory).is_absolute():
            output_directory = str(base_path / output_directory)

        job_config = JobConfig(
            name=job_data.get("name", "Job"),
            output_directory=output_directory,
            load_value=float(load_data.get("value", 1.0)),
            load_units=load_data.get("units", "Repeats"),
        )

        # Parse stress input
        stress_data = dict(data.get("stress") or {})
        stress_file = stress_data.get("file")
        if base_path and stress_file and not Path(stress_file).is_absolute():
            stress_file = str(base_path / stress_file)

        stress_config = StressInputConfig(
            file=stress_file,
            separator=stress_data.get("separator", ","),
            n_locations=stress_data.get("n_locations"),
            n_samples=stress_data.get("n_samples", 1),
            components={k: stress_data[k] for k in COMPONENTS if k in stress_data},
            main_ids=stress_data.get("main_ids"),
            sub_ids=stress_data.get("sub_ids"),
        )

        # Parse material library
        materials = {}
        for mat_data in data.get("materials") or []:
            material = MaterialParameters.from_dict(mat_data)
            if material.name in materials:
                raise ValueError(f"Duplicate material name: {material.name}")
            materials[material.name] = material

        # Parse groups
        groups = [
            GroupConfig(
                name=g.get("name", f"group-{i + 1}"),
                material=g.get("material"),
                size=g.get("size", 0),
            )
            for i, g in enumerate(data.get("groups") or [])
        ]

        return cls(
            job=job_config,
            stress=stress_config,
            materials=materials,
            material=data.get("material"),
            groups=groups,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for serialization."""
        result = {
            "job": {
                "name": self.job.name,
                "output_directory": self.job.output_directory,
                "load_equivalent": {
                    "value": self.job.load_value,
                    "units": self.job.load_units,
                },
            },
            "stress": {},
            "materials": [m.to_dict() for m in self.materials.values()],
        }

        if self.stress.file:
            result["stress"]["file"] = self.stress.file
            result["stress"]["separator"] = self.stress.separator
        else:
            result["stress"]["n_locations"] = self.stress.n_locations
            result["stress"]["n_samples"] = self.stress.n_samples
            result["stress"].update({k: list(v) for k, v in self.stress.components.items()})
            if self.stress.main_ids is not None:
                result["stress"]["main_ids"] = list(self.stress.main_ids)
            if self.stress.sub_ids is not None:
                result["stress"]["sub_ids"] = list(self.stress.sub_ids)

        if self.material:
            result["material"] = self.material

        if self.groups:
            result["groups"] = [
                {"name": g.name, "material": g.material, "size": g.size} for g in self.groups
            ]

        return result

    def save_yaml(self, yaml_path: Union[str, Path]) -> None:
        """Save configuration to YAML file.

        Parameters
        ----------
        yaml_path : str or Path
            Path to the output YAML file.
        """
        with open(yaml_path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def build_resolver(self, n_locations: int):
        """Create the region resolver for ``n_locations`` locations."""
        from composite_criteria.solvers.groups import GroupResolver, RegionDefinition

        regions = [RegionDefinition(g.name, g.material, g.size) for g in self.groups]
        return GroupResolver(
            n_locations,
            default_material=self.default_material,
            regions=regions,
            library=self.materials,
        )

    def validate(self) -> List[str]:
        """Validate the complete configuration.

        Returns
        -------
        list of str
            List of validation warnings (empty if all OK).
        """
        from composite_criteria.constitutive.availability import classify_availability

        warnings = []

        if not self.materials:
            warnings.append("No materials defined; no criteria can be evaluated")

        used = {g.material for g in self.groups} if self.groups else {self.material}
        for name in sorted(n for n in used if n):
            if not classify_availability(self.materials[name]).any_enabled:
                warnings.append(f"Material '{name}' does not define enough data for any criterion")

        if self.stress.file is None and self.groups:
            total = sum(g.size for g in self.groups)
            if total != self.stress.n_locations:
                warnings.append(
                    f"Groups cover {total} locations but the stress field has {self.stress.n_locations}"
                )

        return warnings

    def __str__(self) -> str:
        """Human-readable string representation."""
        lines = [
            "Composite Failure Job Configuration",
            "=" * 40,
            f"Job: {self.job.name}",
            f"  Loading: {self.job.load_value:.3g} {self.job.load_units}",
            f"  Output: {self.job.output_directory}",
        ]
        if self.stress.file:
            lines.append(f"Stress: {self.stress.file}")
        else:
            lines.append(
                f"Stress: inline ({self.stress.n_locations} locations x {self.stress.n_samples} samples)"
            )

        lines.append(f"Materials: {', '.join(self.materials) or '(none)'}")
        if self.groups:
            lines.append(f"Groups: {len(self.groups)}")
            for g in self.groups:
                lines.append(f"  {g.name}: {g.size} locations, {g.material}")
        else:
            lines.append(f"Groups: default ({self.material})")

        return "\n".join(lines)
