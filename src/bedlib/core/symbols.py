"""Canonical string symbols (chromosome names, strand markers) comparable by identity."""
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional
import threading


# Classes --------------------------------------------------------------------------------------------------------------
class Interner:
    """
    A symbol table that deduplicates strings.

    Equal strings always intern to the very same object, so interned symbols can be compared
    with ``is`` and hashed cheaply. The first object seen for a given value becomes the
    canonical one.

    Args:
        symbols: Optional strings to intern up front.

    Examples:
        >>> interner = Interner()
        >>> a = interner.intern(''.join(['chr', '1']))
        >>> a is interner.intern('chr1')
        True
    """
    __slots__ = ('_table', '_lock')

    def __init__(self, symbols: Iterable[str] = None):
        self._table: dict[str, str] = {}
        self._lock = threading.Lock()
        if symbols:
            for symbol in symbols: self.intern(symbol)

    def intern(self, s: str) -> str:
        """
        Returns the canonical object for ``s``, registering it on first sight.

        Args:
            s: The string to canonicalize.

        Returns:
            The interned string.
        """
        if (symbol := self._table.get(s)) is not None: return symbol
        with self._lock: return self._table.setdefault(s, s)

    __call__ = intern

    def __len__(self) -> int: return len(self._table)
    def __contains__(self, item) -> bool: return item in self._table
    def __iter__(self) -> Iterator[str]: return iter(list(self._table))
    def __repr__(self): return f"<Interner: {len(self)} symbols>"


@dataclass(frozen=True, slots=True)
class StrandSymbols:
    """
    The canonical forward and reverse strand symbols of one interner.

    Build it once per interner with :meth:`from_interner`; consumers filter regions by comparing
    a region's strand against these with ``is``.
    """
    forward: str
    reverse: str

    @classmethod
    def from_interner(cls, interner: Interner) -> 'StrandSymbols':
        return cls(interner.intern('+'), interner.intern('-'))

    def resolve(self, value: str) -> Optional[str]:
        """Returns the sentinel matching ``value``, or None if it is not a strand literal."""
        if value == '+': return self.forward
        if value == '-': return self.reverse
        return None

    def __iter__(self): return iter((self.forward, self.reverse))
