"""Turn location spans into graph entities and relations."""

from dataclasses import dataclass, field

from ..graph.models import Entity, Relation
from .locations import LocationExtractor, LocationSpan

CONTEXT_CHARS = 20
LOCATION_ENTITY_TYPE = "location"
MENTIONS_LOCATION = "mentions_location"
LOCATED_IN = "located_in"


@dataclass
class LocationRecords:
    """Entities and relations built from one extraction pass."""

    entities: list[Entity] = field(default_factory=list)
    relations: list[Relation] = field(default_factory=list)


class LocationRecordBuilder:
    """Build location entities and relations from extracted spans."""

    def __init__(self, extractor: LocationExtractor | None = None):
        """Initialize the builder.

        Args:
            extractor: Location extractor (defaults to the standard catalog)
        """
        self.extractor = extractor or LocationExtractor()

    def build(self, text: str, source_entity: str | None = None) -> LocationRecords:
        """Extract locations from text and build graph records for them.

        Records are not deduplicated within the batch; the store drops
        anything already present when they are submitted.

        Args:
            text: Text to scan
            source_entity: Optional entity that mentions the locations

        Returns:
            LocationRecords with entities and relations
        """
        records = LocationRecords()

        for span in self.extractor.extract(text):
            records.entities.append(self._location_entity(span, text))

            if source_entity:
                records.relations.append(
                    Relation(source=source_entity, target=span.text, relation_type=MENTIONS_LOCATION)
                )

            if span.type == "city":
                self._add_parent(span, records)

        return records

    def _location_entity(self, span: LocationSpan, text: str) -> Entity:
        snippet = text[max(0, span.start - CONTEXT_CHARS):min(len(text), span.end + CONTEXT_CHARS)]
        return Entity(
            name=span.text,
            entity_type=LOCATION_ENTITY_TYPE,
            observations=[
                f"Location type: {span.type}",
                f'Extracted from text: "{snippet}"',
                f"Original context: positions {span.start}-{span.end}",
            ],
        )

    def _add_parent(self, span: LocationSpan, records: LocationRecords) -> None:
        """Add the state or country of a "City, Region" span."""
        parts = [part.strip() for part in span.text.split(",")]
        if len(parts) != 2 or not all(parts):
            return

        city, state_or_country = parts
        parent_type = "state" if len(state_or_country) <= 3 else "country"
        records.entities.append(
            Entity(
                name=state_or_country,
                entity_type=LOCATION_ENTITY_TYPE,
                observations=[
                    f"Location type: {parent_type}",
                    f"Parent location of: {city}",
                ],
            )
        )
        records.relations.append(
            Relation(source=span.text, target=state_or_country, relation_type=LOCATED_IN)
        )
