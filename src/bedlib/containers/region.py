"""BED regions: validated genomic intervals with their decoded optional columns."""
from typing import Optional, Sequence

import numpy as np

from bedlib.core.fields import INT_MAX, INT_MIN, OptionalFields, OptionalFieldDecoder
from bedlib.utils.resources import RESOURCES


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class RegionError(ValueError): pass


# Classes --------------------------------------------------------------------------------------------------------------
class Region:
    """
    Immutable BED interval. Safe for hashing and use in sets/dicts.

    Coordinates must fit in 32 bits but are otherwise taken as given: ``start`` is not checked
    against ``end`` and negative values are accepted.

    Attributes:
        chrom: The canonical chromosome symbol.
        start: The start position (0-based, inclusive).
        end: The end position (0-based, exclusive).
        fields: The decoded optional columns.

    Raises:
        RegionError: If ``start`` or ``end`` does not fit in 32 bits.

    Examples:
        >>> decoder = OptionalFieldDecoder(Interner())
        >>> region = Region.from_columns('chr1', 100, 200, ['geneA', '500', '+'], decoder)
        >>> region.name, region.score, region.strand is decoder.strands.forward
        ('geneA', 500, True)
    """
    __slots__ = ('_chrom', '_start', '_end', '_fields')

    def __init__(self, chrom: str, start: int, end: int, fields: OptionalFields = None):
        self._chrom: str = chrom
        self._start: int = int(start)
        self._end: int = int(end)
        if not (INT_MIN <= self._start <= INT_MAX and INT_MIN <= self._end <= INT_MAX):
            raise RegionError(f"Coordinates {self._start}-{self._end} do not fit in 32 bits")
        self._fields: OptionalFields = fields if fields is not None else OptionalFields()

    @classmethod
    def from_columns(cls, chrom: str, start: int, end: int, columns: Sequence[str],
                     decoder: OptionalFieldDecoder) -> 'Region':
        """
        Builds a region from raw optional BED columns.

        Args:
            chrom: Chromosome name, interned through the decoder's interner.
            start: Start position.
            end: End position.
            columns: The raw optional columns in file order (at most nine).
            decoder: Decoder used to validate the optional columns.

        Returns:
            A new Region.

        Raises:
            InvalidOptionalFieldError: If any optional column is invalid.
            RegionError: If a coordinate does not fit in 32 bits.
        """
        fields = decoder.decode(columns)
        return cls(decoder.interner.intern(chrom), start, end, fields)

    @property
    def chrom(self) -> str: return self._chrom
    @property
    def start(self) -> int: return self._start
    @property
    def end(self) -> int: return self._end
    @property
    def fields(self) -> OptionalFields: return self._fields
    @property
    def name(self) -> Optional[str]: return self._fields.name
    @property
    def score(self) -> Optional[int]: return self._fields.score
    @property
    def strand(self) -> Optional[str]: return self._fields.strand

    def __len__(self): return max(0, self._end - self._start)
    def __hash__(self): return hash((self._chrom, self._start, self._end, self._fields))
    def __repr__(self):
        return f"Region({self._chrom}:{self._start}-{self._end}{', ' + repr(list(self._fields)) if self._fields else ''})"

    def __eq__(self, other):
        if not isinstance(other, Region): return False
        return (self._chrom == other._chrom and self._start == other._start and
                self._end == other._end and self._fields == other._fields)

    def overlaps(self, start: int, end: int) -> bool:
        """Returns True if the region shares at least one base with ``[start, end)``."""
        return self._start < end and self._end > start

    def to_columns(self) -> list[str]:
        """Formats the region as BED columns (``chrom``, ``start``, ``end``, then the optional ones)."""
        return [self._chrom, str(self._start), str(self._end), *self._fields.to_columns()]

    @classmethod
    def random(cls, chrom: str, rng: np.random.Generator = None, length: int = None, min_len: int = 1,
               max_len: int = 10_000, min_start: int = 0, max_start: int = 1_000_000,
               fields: OptionalFields = None) -> 'Region':
        """
        Generates a random Region.

        Args:
            chrom: Chromosome symbol.
            rng: Random number generator.
            length: Fixed length (optional).
            min_len: Minimum length.
            max_len: Maximum length.
            min_start: Minimum start position.
            max_start: Maximum start position.
            fields: Optional columns to attach.

        Returns:
            A random Region.
        """
        if rng is None: rng = RESOURCES.rng
        if not length: length = int(rng.integers(min_len, max_len))
        safe_max_start = max(min_start + 1, max_start - length)
        start = int(rng.integers(min_start, safe_max_start))
        return cls(chrom, start, start + length, fields)
