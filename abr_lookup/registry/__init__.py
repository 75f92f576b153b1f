"""ABR registry integration: entity model, response mapping and HTTP client."""

from abr_lookup.registry.models import (
    ABN,
    Address,
    EffectiveRecord,
    Entity,
    EntityType,
    FieldGroup,
    GST,
    Name,
    SearchResult,
    Status,
    active_subset,
    current,
)
from abr_lookup.registry.mapper import MappedResponse, map_response

__all__ = [
    "ABN",
    "Address",
    "EffectiveRecord",
    "Entity",
    "EntityType",
    "FieldGroup",
    "GST",
    "Name",
    "SearchResult",
    "Status",
    "active_subset",
    "current",
    "MappedResponse",
    "map_response",
]
