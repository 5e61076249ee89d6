"""
In-memory model of BED files: validated regions grouped by track and by chromosome.
"""
from bedlib.utils.resources import RESOURCES, BedlibWarning
from bedlib.core.symbols import Interner, StrandSymbols
from bedlib.core.fields import (BedField, Violation, InvalidOptionalFieldError, OptionalFields,
                                OptionalFieldDecoder)
from bedlib.containers.region import Region, RegionError
from bedlib.containers.track import Track
from bedlib.containers.bed import Bed, RegionMap, UnsortedRegionsWarning

__all__ = [
    'RESOURCES', 'BedlibWarning', 'Interner', 'StrandSymbols', 'BedField', 'Violation',
    'InvalidOptionalFieldError', 'OptionalFields', 'OptionalFieldDecoder', 'Region', 'RegionError', 'Track', 'Bed',
    'RegionMap', 'UnsortedRegionsWarning'
]
