"""ABN / ACN lookup producing a flattened "as of today" view of an entity."""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Union

from abr_lookup.registry.abr_client import (
    fetch_abn_xml,
    fetch_asic_xml,
    sanitize_lookup_number,
)
from abr_lookup.registry.mapper import MappedResponse, map_response
from abr_lookup.registry.models import Entity
from abr_lookup.registry.parsing import extract_field_groups


# Flattened attributes, in output order
ATTRIBUTES = (
    "abn",
    "current",
    "effective_from",
    "effective_to",
    "entity_status",
    "entity_type",
    "entity_type_description",
    "given_name",
    "other_given_name",
    "family_name",
    "trading_name",
    "state_code",
    "postcode",
    "registered_name",
)


def _present(value: Any) -> bool:
    return value is not None and value != ""


def to_json_value(value: Any) -> Any:
    """Convert dates (also nested in dicts and lists) to ISO strings."""
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_json_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_json_value(v) for v in value]
    return value


@dataclass
class LookupResult:
    """Result of one lookup.

    Either a success view (attributes derived from the entity) or an error
    view (registry exceptions only). ``attributes()`` never mixes the two.
    """
    lookup_number: str
    as_of: date
    entity: Entity = field(default_factory=Entity)
    exceptions: Dict[str, List[str]] = field(default_factory=dict)

    abn: Optional[str] = None
    current: Optional[bool] = None
    effective_from: Optional[date] = None
    effective_to: Optional[date] = None
    entity_status: Optional[str] = None
    entity_type: Optional[str] = None
    entity_type_description: Optional[str] = None
    given_name: Optional[str] = None
    other_given_name: Optional[str] = None
    family_name: Optional[str] = None
    trading_name: Optional[str] = None
    state_code: Optional[str] = None
    postcode: Optional[str] = None
    registered_name: Optional[str] = None

    @property
    def has_errors(self) -> bool:
        return bool(self.exceptions)

    def error_messages(self) -> List[str]:
        """All registry exception messages, in response order per code."""
        return [msg for messages in self.exceptions.values() for msg in messages]

    def errors_for(self, code: str) -> List[str]:
        return list(self.exceptions.get(code, []))

    def attributes(self) -> Dict[str, Any]:
        """Flattened view keyed by attribute name.

        With registry exceptions only ``lookup_number`` and ``errors`` are
        returned. Otherwise attributes with no known value are left out.
        """
        attrs: Dict[str, Any] = {"lookup_number": self.lookup_number}
        if self.has_errors:
            attrs["errors"] = ", ".join(self.error_messages())
            return attrs

        for name in ATTRIBUTES:
            value = getattr(self, name)
            if _present(value):
                attrs[name] = value
        return attrs

    def as_json(self) -> Dict[str, Any]:
        return to_json_value(self.attributes())

    def history(self) -> Dict[str, Any]:
        """Full effective-dated history of the entity."""
        return self.entity.to_dict()

    def history_json(self) -> Dict[str, Any]:
        return to_json_value(self.history())


def build_lookup_result(lookup_number: str, mapped: MappedResponse, as_of: date) -> LookupResult:
    """Derive the flattened view from a mapped response.

    Args:
        lookup_number: Sanitized lookup key.
        mapped: Output of the response mapper.
        as_of: Evaluation date for resolving current values.
    """
    entity = mapped.entity
    result = LookupResult(
        lookup_number=lookup_number,
        as_of=as_of,
        entity=entity,
        exceptions={code: list(messages) for code, messages in mapped.exceptions.items()},
    )
    if mapped.has_errors:
        return result

    status = entity.current_status(as_of)
    name = entity.current_name(as_of)
    address = entity.current_address(as_of)
    trading_names = entity.current_trading_names(as_of)

    result.abn = entity.abn.identifier
    result.current = entity.identifier_is_current()

    if status is not None:
        result.effective_from = status.effective_from
        result.effective_to = status.effective_to
        result.entity_status = status.status_code

    result.entity_type = entity.entity_type.code
    result.entity_type_description = entity.entity_type.description

    if name is not None:
        result.given_name = name.given_name
        result.other_given_name = name.other_given_name
        result.family_name = name.family_name
        result.registered_name = name.name

    if trading_names:
        result.trading_name = trading_names[0].organisation_name

    if address is not None:
        result.state_code = address.state_code
        result.postcode = address.postcode

    return result


def lookup_from_xml(lookup_number: str, xml_text: Union[str, bytes], as_of: date) -> LookupResult:
    """Map a raw ABR response body into a LookupResult."""
    mapped = map_response(extract_field_groups(xml_text), as_of)
    return build_lookup_result(lookup_number, mapped, as_of)


def lookup_abn(value, as_of: Optional[date] = None) -> LookupResult:
    """Look up an ABN.

    Args:
        value: ABN in any formatting (spaces and punctuation are stripped).
        as_of: Evaluation date. Defaults to today.

    Raises:
        ABRClientError: On transport or configuration errors. Registry-reported
            problems are returned in ``LookupResult.exceptions`` instead.
    """
    lookup_number = sanitize_lookup_number(value)
    as_of = as_of or date.today()
    return lookup_from_xml(lookup_number, fetch_abn_xml(lookup_number), as_of)


def lookup_asic(value, as_of: Optional[date] = None) -> LookupResult:
    """Look up an ACN. Same contract as :func:`lookup_abn`."""
    lookup_number = sanitize_lookup_number(value)
    as_of = as_of or date.today()
    return lookup_from_xml(lookup_number, fetch_asic_xml(lookup_number), as_of)
