"""The BED container: tracks plus a chromosome-keyed region map, with sorting and overlap queries."""
from itertools import chain
from typing import Generator, Iterator, Mapping, Optional
from warnings import warn
import threading

import numpy as np

from bedlib.containers.region import Region
from bedlib.containers.track import Track
from bedlib.core.fields import INT_MAX, INT_MIN
from bedlib.utils.resources import BedlibWarning, jit


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class UnsortedRegionsWarning(BedlibWarning): pass


# Classes --------------------------------------------------------------------------------------------------------------
class RegionMap(Mapping):
    """
    Maps chromosome symbols onto their regions, in insertion order until :meth:`sort` is called.

    The map is read-only from the outside (buckets come back as tuples). Its mutation entry
    points, :meth:`add` and :meth:`sort`, and :meth:`query` share one lock, so several loaders may
    fill the same map concurrently.

    Sorting also builds numpy start/end arrays per bucket, which :meth:`query` uses for a binary
    search. Adding a region to a bucket drops its arrays again until the next sort.
    """
    __slots__ = ('_buckets', '_index', '_lock')
    _DTYPE = np.int64

    def __init__(self):
        self._buckets: dict[str, list[Region]] = {}
        self._index: dict[str, tuple[np.ndarray, np.ndarray, int]] = {}
        self._lock = threading.Lock()

    def __getitem__(self, chrom: str) -> tuple[Region, ...]: return tuple(self._buckets[chrom])
    def __contains__(self, chrom) -> bool: return chrom in self._buckets
    def __len__(self) -> int: return len(self._buckets)
    def __iter__(self) -> Iterator[str]: return iter(list(self._buckets))
    def __repr__(self): return f"<RegionMap: {len(self)} chromosomes, {self.n_regions} regions>"

    @property
    def n_regions(self) -> int:
        """Returns the total number of regions across all chromosomes."""
        return sum(len(bucket) for bucket in self._buckets.values())

    def is_sorted(self, chrom: str) -> bool:
        """Returns True if the bucket for ``chrom`` has not been added to since the last sort."""
        return chrom in self._index or chrom not in self._buckets

    def add(self, region: Region):
        """
        Appends a region to the bucket of its own chromosome, creating the bucket if needed.

        Regions are never replaced or deduplicated.
        """
        with self._lock:
            self._buckets.setdefault(region.chrom, []).append(region)
            self._index.pop(region.chrom, None)

    def sort(self):
        """Stably sorts every unsorted bucket by start position; ties keep their insertion order."""
        with self._lock:
            for chrom, bucket in self._buckets.items():
                if chrom in self._index: continue
                starts = np.fromiter((r.start for r in bucket), dtype=self._DTYPE, count=len(bucket))
                if not _is_sorted_kernel(starts):
                    order = np.argsort(starts, kind='stable')
                    bucket[:] = [bucket[i] for i in order]
                    starts = starts[order]
                ends = np.fromiter((r.end for r in bucket), dtype=self._DTYPE, count=len(bucket))
                max_len = int(max(0, np.max(ends - starts))) if len(bucket) else 0
                self._index[chrom] = (starts, ends, max_len)

    def query(self, chrom: str, start: int, end: int, stacklevel: int = 2) -> list[Region]:
        """
        Returns the regions on ``chrom`` overlapping ``[start, end)``, in bucket order.

        Args:
            chrom: Chromosome symbol.
            start: Query start (inclusive).
            end: Query end (exclusive).
            stacklevel: Passed on to :func:`warnings.warn`, so the warning points at the caller.

        Returns:
            The overlapping regions; empty if the chromosome is unknown.

        Warns:
            UnsortedRegionsWarning: If the bucket has changed since the last sort. The query then
                falls back to a linear scan.
        """
        with self._lock:
            if not (bucket := self._buckets.get(chrom)): return []
            if (index := self._index.get(chrom)) is None:
                warn(f"Regions on {chrom} are not sorted, call sort() after adding regions",
                     UnsortedRegionsWarning, stacklevel=stacklevel)
                return [r for r in bucket if r.overlaps(start, end)]
            starts, ends, max_len = index
            # Region coordinates are 32-bit, so clamping the query just past that range changes no hits
            start, end = (min(max(x, INT_MIN - 1), INT_MAX + 1) for x in (start, end))
            return [bucket[i] for i in _query_kernel(starts, ends, start, end, max_len)]


class Bed:
    """
    The contents of a BED file: its tracks and all of its regions grouped by chromosome.

    Fill it with :meth:`add_region` (and :meth:`add_track`), call :meth:`sort_regions` once
    loading is done, then query it. Tracks and the region map are kept independently.

    Examples:
        >>> decoder = OptionalFieldDecoder(Interner())
        >>> bed = Bed()
        >>> for start in (50, 10, 30):
        ...     bed.add_region(Region.from_columns('chr2', start, start + 5, [], decoder))
        >>> bed.sort_regions()
        >>> [r.start for r in bed.regions['chr2']]
        [10, 30, 50]
    """
    __slots__ = ('_tracks', '_regions')

    def __init__(self):
        self._tracks: list[Track] = []
        self._regions = RegionMap()

    @property
    def tracks(self) -> tuple[Track, ...]: return tuple(self._tracks)
    @property
    def regions(self) -> RegionMap: return self._regions
    @property
    def chroms(self) -> list[str]: return list(self._regions)

    def __len__(self): return self._regions.n_regions
    def __iter__(self) -> Iterator[Region]: return chain.from_iterable(self._regions.values())
    def __repr__(self): return f"<Bed: {len(self._tracks)} tracks, {len(self._regions)} chromosomes, {len(self)} regions>"

    def add_track(self, track: Track):
        """Appends a track, keeping file order."""
        self._tracks.append(track)

    def add_region(self, region: Region):
        """Adds a region to the region map under its own chromosome."""
        self._regions.add(region)

    def sort_regions(self):
        """Stably sorts the regions of every chromosome by start position."""
        self._regions.sort()

    def overlapping(self, chrom: str, start: int, end: int) -> list[Region]:
        """Returns the regions on ``chrom`` overlapping ``[start, end)``. See :meth:`RegionMap.query`."""
        return self._regions.query(chrom, start, end, stacklevel=3)

    def on_strand(self, strand: str, chrom: Optional[str] = None) -> Generator[Region, None, None]:
        """
        Yields the regions whose strand is the given canonical strand symbol.

        Args:
            strand: A sentinel from :class:`~bedlib.core.symbols.StrandSymbols`. Matched by identity.
            chrom: Restrict to one chromosome.
        """
        if chrom is None: regions = self
        elif chrom in self._regions: regions = self._regions[chrom]
        else: return
        for region in regions:
            if region.strand is strand: yield region


# Kernels --------------------------------------------------------------------------------------------------------------
@jit(nopython=True, cache=True, nogil=True)
def _is_sorted_kernel(starts):
    """Checks if the starts are already non-decreasing."""
    for i in range(len(starts) - 1):
        if starts[i] > starts[i + 1]: return False
    return True


@jit(nopython=True, cache=True, nogil=True)
def _query_kernel(starts, ends, q_start, q_end, max_len):
    """Ascending indices of the start-sorted intervals overlapping [q_start, q_end)."""
    hi = np.searchsorted(starts, q_end, side='left')
    # an interval starting before q_start - max_len ends before q_start
    lo = np.searchsorted(starts, q_start - max_len, side='left')
    hits = np.empty(max(hi - lo, 0), dtype=np.int64)
    n = 0
    for i in range(lo, hi):
        if ends[i] > q_start:
            hits[n] = i
            n += 1
    return hits[:n]
