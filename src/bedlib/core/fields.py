"""Decoding and validation of the nine optional BED columns."""
from dataclasses import dataclass, fields as dataclass_fields
from enum import Enum, IntEnum, auto
from re import compile as regex
from typing import ClassVar, Iterator, Optional, Sequence, Union

from bedlib.core.symbols import Interner, StrandSymbols


# Constants ------------------------------------------------------------------------------------------------------------
INT_MIN = -(2 ** 31)
INT_MAX = 2 ** 31 - 1


# Classes --------------------------------------------------------------------------------------------------------------
class BedField(IntEnum):
    """
    Positions of the optional BED columns, counted after ``chrom``, ``start`` and ``end``.

    Each member maps to its public column label via ``__str__`` and to the matching
    :class:`OptionalFields` attribute via :attr:`attribute`.

    Examples:
        >>> str(BedField.THICK_START)
        'ThickStart'
        >>> BedField.THICK_START.attribute
        'thick_start'
    """
    NAME = 0
    SCORE = 1
    STRAND = 2
    THICK_START = 3
    THICK_END = 4
    ITEM_RGB = 5
    BLOCK_COUNT = 6
    BLOCK_SIZES = 7
    BLOCK_STARTS = 8

    _STR_CACHE: ClassVar[dict]
    _ATTR_CACHE: ClassVar[dict]

    def __str__(self): return self._STR_CACHE[self]
    @property
    def attribute(self) -> str: return self._ATTR_CACHE[self]

    @classmethod
    def _init_caches(cls):
        cls._STR_CACHE = {}
        cls._ATTR_CACHE = {}
        for k in cls:
            cls._ATTR_CACHE[k] = k.name.lower()
            cls._STR_CACHE[k] = ''.join(part.capitalize() for part in k.name.split('_'))
        cls._STR_CACHE[cls.ITEM_RGB] = 'ItemRgb'


class Violation(Enum):
    """The constraint an optional field broke."""
    NOT_AN_INTEGER = auto()
    INTEGER_OUT_OF_RANGE = auto()
    SCORE_OUT_OF_RANGE = auto()
    INVALID_STRAND = auto()
    UNKNOWN_FIELD = auto()
    MISSING_PRECEDING = auto()


class InvalidOptionalFieldError(ValueError):
    """
    Raised when an optional BED column fails validation.

    Attributes:
        value: The offending raw value.
        index: Position of the offending column among the optional columns.
        field: The schema entry for ``index``, or None if ``index`` is past the schema.
        violation: The constraint that was broken.
    """
    _MESSAGES = {
        Violation.NOT_AN_INTEGER: "{value!r} is not an integer",
        Violation.INTEGER_OUT_OF_RANGE: "{value!r} does not fit in 32 bits",
        Violation.SCORE_OUT_OF_RANGE: "{value!r} is outside the range {lo}-{hi}",
        Violation.INVALID_STRAND: "{value!r} is not '+' or '-'",
        Violation.UNKNOWN_FIELD: "{value!r} at position {index} is out of 0-{last}",
        Violation.MISSING_PRECEDING: "present although an earlier field is missing",
    }

    def __init__(self, value, index: int, violation: Violation):
        self.value = value
        self.index = index
        self.violation = violation
        self.field = BedField(index) if 0 <= index < len(BedField) else None
        label = f"{self.field} field" if self.field is not None else "optional field"
        detail = self._MESSAGES[violation].format(
            value=value, index=index, last=len(BedField) - 1,
            lo=OptionalFieldDecoder.SCORE_MIN, hi=OptionalFieldDecoder.SCORE_MAX
        )
        super().__init__(f"invalid {label}: {detail}")

    def __reduce__(self): return self.__class__, (self.value, self.index, self.violation)


@dataclass(frozen=True, slots=True)
class OptionalFields:
    """
    The decoded optional columns of a BED region.

    Every member may be absent (None), but the BED format declares columns in order, so a member
    may only be present if all the members before it are present too. This is checked on
    construction.

    The record also reads like the ordered sequence of its present values.

    Examples:
        >>> fields = OptionalFields(name='geneA', score=500)
        >>> len(fields), fields[BedField.SCORE]
        (2, 500)
        >>> list(fields)
        ['geneA', 500]
    """
    name: Optional[str] = None
    score: Optional[int] = None
    strand: Optional[str] = None
    thick_start: Optional[int] = None
    thick_end: Optional[int] = None
    item_rgb: Optional[bool] = None
    block_count: Optional[int] = None
    block_sizes: Optional[int] = None
    block_starts: Optional[int] = None

    def __post_init__(self):
        missing = False
        for i, f in enumerate(dataclass_fields(self)):
            value = getattr(self, f.name)
            if value is None: missing = True
            elif missing: raise InvalidOptionalFieldError(value, i, Violation.MISSING_PRECEDING)

    def __len__(self) -> int:
        for i, f in enumerate(dataclass_fields(self)):
            if getattr(self, f.name) is None: return i
        return len(BedField)

    def __iter__(self) -> Iterator:
        for i in range(len(self)): yield getattr(self, BedField(i).attribute)

    def __getitem__(self, item: Union[int, BedField]):
        if isinstance(item, slice): return list(self)[item]
        n = len(self)
        if item < 0: item += n
        if not 0 <= item < n: raise IndexError(f"optional field {item} is not present")
        return getattr(self, BedField(item).attribute)

    def to_columns(self) -> list[str]:
        """
        Formats the present values back into BED column strings.

        Returns:
            One string per present field; decoding them yields an equal record.
        """
        columns = []
        for value in self:
            if isinstance(value, bool): columns.append('on' if value else 'off')
            else: columns.append(str(value))
        return columns


class OptionalFieldDecoder:
    """
    Turns raw optional BED columns into an :class:`OptionalFields` record.

    Columns are interpreted purely by position (see :class:`BedField`). Decoding stops at the
    first invalid column; no partial record is ever returned. Strand values are resolved to the
    canonical symbols of the given interner, exposed as :attr:`strands`.

    Args:
        interner: The symbol table used to canonicalize strand (and chromosome) names.

    Examples:
        >>> decoder = OptionalFieldDecoder(Interner())
        >>> fields = decoder.decode(['geneA', '500', '+'])
        >>> fields.strand is decoder.strands.forward
        True
    """
    __slots__ = ('_interner', '_strands', '_parsers')
    SCORE_MIN: ClassVar[int] = 0
    SCORE_MAX: ClassVar[int] = 1000
    _INTEGER = regex(r'[+-]?[0-9]+')

    def __init__(self, interner: Interner):
        self._interner = interner
        self._strands = StrandSymbols.from_interner(interner)
        self._parsers = {
            BedField.NAME: self._parse_name,
            BedField.SCORE: self._parse_score,
            BedField.STRAND: self._parse_strand,
            BedField.THICK_START: self._parse_int,
            BedField.THICK_END: self._parse_int,
            BedField.ITEM_RGB: self._parse_item_rgb,
            BedField.BLOCK_COUNT: self._parse_int,
            BedField.BLOCK_SIZES: self._parse_int,
            BedField.BLOCK_STARTS: self._parse_int,
        }

    @property
    def interner(self) -> Interner: return self._interner
    @property
    def strands(self) -> StrandSymbols: return self._strands
    def __repr__(self): return f"<OptionalFieldDecoder: {self._interner!r}>"

    def decode(self, columns: Sequence[str]) -> OptionalFields:
        """
        Decodes the optional columns of one BED row.

        Args:
            columns: The raw optional columns in file order (at most nine).

        Returns:
            The decoded record.

        Raises:
            InvalidOptionalFieldError: At the first column that breaks its constraint.
        """
        values = {}
        for i, raw in enumerate(columns):
            if i >= len(BedField): raise InvalidOptionalFieldError(raw, i, Violation.UNKNOWN_FIELD)
            field = BedField(i)
            values[field.attribute] = self._parsers[field](raw, i)
        return OptionalFields(**values)

    __call__ = decode

    @staticmethod
    def _parse_name(raw: str, index: int) -> str: return raw

    @staticmethod
    def _parse_item_rgb(raw: str, index: int) -> bool: return raw == 'on'

    def _to_int(self, raw: str, index: int) -> int:
        if not self._INTEGER.fullmatch(raw): raise InvalidOptionalFieldError(raw, index, Violation.NOT_AN_INTEGER)
        return int(raw)

    def _parse_int(self, raw: str, index: int) -> int:
        value = self._to_int(raw, index)
        if not INT_MIN <= value <= INT_MAX: raise InvalidOptionalFieldError(raw, index, Violation.INTEGER_OUT_OF_RANGE)
        return value

    def _parse_score(self, raw: str, index: int) -> int:
        score = self._to_int(raw, index)
        if not self.SCORE_MIN <= score <= self.SCORE_MAX:
            raise InvalidOptionalFieldError(raw, index, Violation.SCORE_OUT_OF_RANGE)
        return score

    def _parse_strand(self, raw: str, index: int) -> str:
        if (strand := self._strands.resolve(raw)) is None:
            raise InvalidOptionalFieldError(raw, index, Violation.INVALID_STRAND)
        return strand


# Cache initialisations ------------------------------------------------------------------------------------------------
BedField._init_caches()
