"""BED tracks: track-line metadata and the regions grouped under it."""
from typing import Iterable, Iterator, Mapping, Optional

from bedlib.containers.region import Region


# Classes --------------------------------------------------------------------------------------------------------------
class Track:
    """
    A BED track directive: free-form ``key=value`` metadata plus the regions it groups.

    Regions can only be appended. The track does not keep itself in sync with a
    :class:`~bedlib.containers.bed.Bed` region map; callers add regions to both.

    Args:
        fields: The track line's metadata (e.g. ``{'name': 'peaks', 'color': '255,0,0'}``).

    Examples:
        >>> track = Track({'name': 'peaks'})
        >>> track.name
        'peaks'
        >>> len(track)
        0
    """
    __slots__ = ('_fields', '_regions')

    def __init__(self, fields: Mapping[str, str] = None):
        self._fields: dict[str, str] = dict(fields) if fields else {}
        self._regions: list[Region] = []

    @property
    def fields(self) -> dict[str, str]: return self._fields
    @property
    def regions(self) -> tuple[Region, ...]: return tuple(self._regions)
    @property
    def name(self) -> Optional[str]: return self._fields.get('name')

    def __len__(self): return len(self._regions)
    def __iter__(self) -> Iterator[Region]: return iter(self._regions)
    def __getitem__(self, item): return self._regions[item]
    def __repr__(self): return f"<Track: {self.name or 'unnamed'}, {len(self)} regions>"

    def add_region(self, region: Region):
        """Appends a region to the track."""
        self._regions.append(region)

    def extend(self, regions: Iterable[Region]):
        """Appends several regions, keeping their order."""
        self._regions.extend(regions)
