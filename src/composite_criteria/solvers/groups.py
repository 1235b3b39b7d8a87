"""
Region (group) resolution.

Locations are partitioned into contiguous, non-overlapping regions, each
evaluated with one material. Without explicit regions the whole location
range forms a single ``default`` region using the global material.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from composite_criteria.core.material import MaterialParameters

logger = logging.getLogger(__name__)

DEFAULT_REGION = "default"


@dataclass(frozen=True)
class RegionDefinition:
    """
    User definition of a region.

    Parameters
    ----------
    name : str
        Region name.
    material : str
        Name of the material in the material library.
    size : int
        Number of locations in the region.
    """

    name: str
    material: str
    size: int


@dataclass(frozen=True)
class RegionSpan:
    """
    A resolved region: a block of locations and its material.

    Attributes
    ----------
    index : int
        Position of the region in evaluation order (0-based).
    name : str
        Region name.
    start : int
        Global index of the first location (0-based).
    count : int
        Number of locations.
    material : MaterialParameters
        Material evaluated for every location in the region.
    """

    index: int
    name: str
    start: int
    count: int
    material: MaterialParameters

    @property
    def stop(self) -> int:
        """Global index one past the last location."""
        return self.start + self.count

    def locations(self) -> range:
        """Global indices of the region's locations."""
        return range(self.start, self.stop)


class GroupResolver:
    """
    Resolves region definitions into contiguous location spans.

    Parameters
    ----------
    n_locations : int
        Total number of analyzed locations.
    default_material : MaterialParameters, optional
        Material of the implicit ``default`` region, required when
        ``regions`` is empty.
    regions : sequence of RegionDefinition, optional
        Explicit regions in location order.
    library : dict, optional
        Materials by name, used to look up ``RegionDefinition.material``.

    Raises
    ------
    ValueError
        If the regions do not cover exactly ``n_locations`` locations, or a
        region names a material that is not in ``library``.

    Examples
    --------
    >>> resolver = GroupResolver(10, default_material=MaterialParameters())
    >>> [(s.name, s.start, s.count) for s in resolver.spans()]
    [('default', 0, 10)]
    """

    def __init__(
        self,
        n_locations: int,
        default_material: Optional[MaterialParameters] = None,
        regions: Optional[Sequence[RegionDefinition]] = None,
        library: Optional[Dict[str, MaterialParameters]] = None,
    ):
        if n_locations < 0:
            raise ValueError(f"Number of locations must be non-negative: {n_locations}")

        self.n_locations = n_locations
        self.default_material = default_material
        self.regions: List[RegionDefinition] = list(regions or [])
        self.library: Dict[str, MaterialParameters] = dict(library or {})

        if self.regions:
            for region in self.regions:
                if region.size <= 0:
                    raise ValueError(f"Region '{region.name}' must contain at least one location")
                if region.material not in self.library:
                    raise ValueError(
                        f"Region '{region.name}' uses unknown material '{region.material}'"
                    )
            total = sum(r.size for r in self.regions)
            if total != n_locations:
                raise ValueError(
                    f"Regions cover {total} locations but {n_locations} are analyzed"
                )
        elif default_material is None:
            raise ValueError("A default material is required when no regions are defined")

    @property
    def is_default(self) -> bool:
        """True when the single implicit region is used."""
        return not self.regions

    def __len__(self) -> int:
        return len(self.regions) if self.regions else 1

    def resolve(
        self, index: int, definition: Optional[RegionDefinition] = None
    ) -> Tuple[int, MaterialParameters]:
        """
        Location count and material of region ``index``.

        Parameters
        ----------
        index : int
            Region position (0-based).
        definition : RegionDefinition, optional
            Region to resolve; defaults to the ``index``-th defined region.

        Returns
        -------
        count : int
            Number of locations in the region.
        material : MaterialParameters
            Material of the region.
        """
        if self.is_default:
            if index != 0:
                raise IndexError(f"Region index {index} out of range (1 region)")
            return self.n_locations, self.default_material

        definition = definition or self.regions[index]
        return definition.size, self.library[definition.material]

    def spans(self) -> Iterator[RegionSpan]:
        """Yield the resolved regions in location order."""
        start = 0
        definitions = self.regions or [None]
        for index, definition in enumerate(definitions):
            count, material = self.resolve(index, definition)
            name = definition.name if definition else DEFAULT_REGION
            logger.debug(
                "Region %d '%s': locations %d-%d, material '%s'",
                index + 1,
                name,
                start + 1,
                start + count,
                material.name,
            )
            yield RegionSpan(index=index, name=name, start=start, count=count, material=material)
            start += count
