"""Pattern-based detection of geographic mentions in text."""

import re
from dataclasses import dataclass

# Word boundaries and digits are ASCII-only, whitespace also covers the
# Unicode spaces (no-break space, ideographic space, ...).
_WHITESPACE = "[\\s\u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff]"


def _compile(pattern: str) -> re.Pattern:
    return re.compile(pattern.replace(r"\s", _WHITESPACE), re.ASCII)


# Order matters: when two spans start at the same offset, the earlier
# pattern in this list wins.
LOCATION_PATTERNS: list[tuple[str, re.Pattern]] = [
    (
        "city",
        _compile(
            r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*),\s*([A-Z]{2}|[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)\b"
        ),
    ),
    (
        "address",
        _compile(
            r"\b\d+\s+[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\s+"
            r"(?i:St|Street|Ave|Avenue|Rd|Road|Blvd|Boulevard|Dr|Drive|Way|Lane|Ln)\b"
        ),
    ),
    (
        "landmark",
        _compile(
            r"\b(?:Mount|Mt\.?|Lake|River|Park|Bridge|University|Hospital|Airport|Station)"
            r"\s+[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\b"
        ),
    ),
    (
        "state",
        _compile(
            r"\b(?:Alabama|Alaska|Arizona|Arkansas|California|Colorado|Connecticut|Delaware"
            r"|Florida|Georgia|Hawaii|Idaho|Illinois|Indiana|Iowa|Kansas|Kentucky|Louisiana"
            r"|Maine|Maryland|Massachusetts|Michigan|Minnesota|Mississippi|Missouri|Montana"
            r"|Nebraska|Nevada|New\s+Hampshire|New\s+Jersey|New\s+Mexico|New\s+York"
            r"|North\s+Carolina|North\s+Dakota|Ohio|Oklahoma|Oregon|Pennsylvania"
            r"|Rhode\s+Island|South\s+Carolina|South\s+Dakota|Tennessee|Texas|Utah|Vermont"
            r"|Virginia|Washington|West\s+Virginia|Wisconsin|Wyoming)\b"
        ),
    ),
    (
        "country",
        _compile(
            r"\b(?:United\s+States|United\s+Kingdom|Canada|Mexico|France|Germany|Italy|Spain"
            r"|Japan|China|India|Australia|Brazil|Argentina)\b"
        ),
    ),
]

LOCATION_TYPES = tuple(location_type for location_type, _ in LOCATION_PATTERNS)


@dataclass(frozen=True)
class LocationSpan:
    """A typed location mention; end is exclusive."""

    text: str
    start: int
    end: int
    type: str  # city, address, landmark, state, country

    def overlaps(self, other: "LocationSpan") -> bool:
        return self.start < other.end and other.start < self.end

    def to_dict(self) -> dict:
        return {"text": self.text, "start": self.start, "end": self.end, "type": self.type}


class LocationExtractor:
    """Find city, address, landmark, state and country mentions in text.

    Every pattern is scanned over the whole text independently. The pooled
    matches are sorted by start offset and kept greedily: a span survives only
    if it does not intersect one that was already kept. A longer match can
    therefore lose to a shorter one that starts earlier.
    """

    def __init__(self, patterns: list[tuple[str, re.Pattern]] | None = None):
        """Initialize the extractor.

        Args:
            patterns: Ordered (type, compiled regex) pairs; defaults to LOCATION_PATTERNS
        """
        self.patterns = patterns if patterns is not None else LOCATION_PATTERNS

    def extract(self, text: str) -> list[LocationSpan]:
        """Extract non-overlapping location spans.

        Args:
            text: Text to scan

        Returns:
            Spans sorted by start offset
        """
        matches = []
        for location_type, pattern in self.patterns:
            for match in pattern.finditer(text):
                location_text = match.group(0).strip()
                matches.append(
                    LocationSpan(
                        text=location_text,
                        start=match.start(),
                        end=match.start() + len(location_text),
                        type=location_type,
                    )
                )
        return self._deduplicate(matches)

    @staticmethod
    def _deduplicate(matches: list[LocationSpan]) -> list[LocationSpan]:
        """Greedy earliest-start selection of non-overlapping spans."""
        kept: list[LocationSpan] = []
        # sorted() is stable, so pattern order breaks ties at the same start
        for span in sorted(matches, key=lambda s: s.start):
            if not any(span.overlaps(existing) for existing in kept):
                kept.append(span)
        return kept


def extract_locations(text: str) -> list[LocationSpan]:
    """Extract location spans with the default pattern catalog."""
    return LocationExtractor().extract(text)
