"""Location extraction module."""

from .locations import LOCATION_TYPES, LocationExtractor, LocationSpan, extract_locations
from .records import LocationRecordBuilder, LocationRecords

__all__ = [
    "LOCATION_TYPES",
    "LocationExtractor",
    "LocationSpan",
    "extract_locations",
    "LocationRecordBuilder",
    "LocationRecords",
]
