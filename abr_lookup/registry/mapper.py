"""Map extracted ABR field groups onto the entity model.

The mapper never raises on bad registry data: malformed dates fall back to
their defaults and registry-reported exceptions are collected as data.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from abr_lookup.registry.models import (
    ABN,
    Address,
    Entity,
    EntityType,
    FieldGroup,
    GST,
    Name,
    SearchResult,
    Status,
)


logger = logging.getLogger(__name__)


# Registry convention for "no end date"
OPEN_ENDED_DATE = "0001-01-01"

# A calendar date, optionally followed by a time part
REGISTRY_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}(T.*)?")


class MalformedDateError(ValueError):
    """Raised when registry date text cannot be parsed."""
    pass


@dataclass
class MappedResponse:
    """Entity built from a response plus registry-reported exceptions."""
    entity: Entity = field(default_factory=Entity)
    exceptions: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def has_errors(self) -> bool:
        return bool(self.exceptions)


def parse_registry_date(text: str) -> date:
    """Parse a date in ABR ``YYYY-MM-DD`` format.

    A trailing ``T<time>`` part is accepted and ignored.

    Raises:
        MalformedDateError: If the text is not a valid date.
    """
    if not REGISTRY_DATE_RE.fullmatch(text):
        raise MalformedDateError(f"Invalid registry date: {text!r}")
    try:
        return datetime.strptime(text[:10], "%Y-%m-%d").date()
    except ValueError:
        raise MalformedDateError(f"Invalid registry date: {text!r}")


def _effective_from(group: FieldGroup, today: date) -> date:
    text = group.get("effectiveFrom")
    if not text:
        return today
    try:
        return parse_registry_date(text)
    except MalformedDateError as e:
        logger.debug("%s in %s, using %s", e, group.name, today)
        return today


def _effective_to(group: FieldGroup) -> Optional[date]:
    text = group.get("effectiveTo")
    if not text or text == OPEN_ENDED_DATE:
        return None
    try:
        parsed = parse_registry_date(text)
    except MalformedDateError as e:
        logger.debug("%s in %s, treating as open-ended", e, group.name)
        return None
    # Timestamped forms of the sentinel, e.g. 0001-01-01T00:00:00
    if parsed == date.min:
        return None
    return parsed


def _status(group: FieldGroup, today: date) -> Status:
    return Status(
        effective_from=_effective_from(group, today),
        effective_to=_effective_to(group),
        status_code=group.get("entityStatusCode"),
    )


def _address(group: FieldGroup, today: date) -> Address:
    return Address(
        effective_from=_effective_from(group, today),
        effective_to=_effective_to(group),
        state_code=group.get("stateCode"),
        postcode=group.get("postcode"),
    )


def _gst(group: FieldGroup, today: date) -> GST:
    return GST(
        effective_from=_effective_from(group, today),
        effective_to=_effective_to(group),
    )


def _person_name(group: FieldGroup, today: date) -> Name:
    return Name(
        effective_from=_effective_from(group, today),
        effective_to=_effective_to(group),
        given_name=group.get("givenName"),
        other_given_name=group.get("otherGivenName"),
        family_name=group.get("familyName"),
    )


def _organisation_name(group: FieldGroup, today: date) -> Name:
    return Name(
        effective_from=_effective_from(group, today),
        effective_to=_effective_to(group),
        organisation_name=group.get("organisationName"),
    )


RecordBuilder = Callable[[FieldGroup, date], object]


# Temporal group name -> (record builder, Entity collection attribute).
# businessName shares the trading_names collection with mainTradingName.
TEMPORAL_GROUPS: Dict[str, Tuple[RecordBuilder, str]] = {
    "entityStatus": (_status, "statuses"),
    "mainBusinessPhysicalAddress": (_address, "addresses"),
    "goodsAndServicesTax": (_gst, "gsts"),
    "legalName": (_person_name, "legal_names"),
    "mainName": (_organisation_name, "main_names"),
    "mainTradingName": (_organisation_name, "trading_names"),
    "businessName": (_organisation_name, "trading_names"),
}


def map_response(groups: Iterable[FieldGroup], today: date) -> MappedResponse:
    """Build an Entity from field groups in response order.

    Args:
        groups: Field groups extracted from the registry response.
        today: Evaluation date, used as the start of records with no
            ``effectiveFrom``.

    Returns:
        MappedResponse with the populated entity and any registry exceptions.
    """
    collections: Dict[str, List[object]] = {}
    abn = ABN()
    entity_type = EntityType()
    exceptions: Dict[str, List[str]] = {}

    for group in groups:
        if group.name in TEMPORAL_GROUPS:
            builder, collection = TEMPORAL_GROUPS[group.name]
            collections.setdefault(collection, []).append(builder(group, today))
        elif group.name == "ABN":
            abn = ABN(
                identifier=group.get("identifierValue"),
                is_current=group.get("isCurrentIndicator"),
            )
        elif group.name == "entityType":
            entity_type = EntityType(
                code=group.get("entityTypeCode"),
                description=group.get("entityDescription"),
            )
        elif group.name == "exception":
            code = group.get("exceptionCode")
            exceptions.setdefault(code, []).append(group.get("exceptionDescription"))
        else:
            logger.debug("Skipping unhandled group %s", group.name)

    entity = Entity(
        abn=abn,
        entity_type=entity_type,
        **{name: tuple(records) for name, records in collections.items()}
    )
    return MappedResponse(entity=entity, exceptions=exceptions)


def _search_name(groups: Dict[str, FieldGroup]) -> Tuple[str, str, Optional[FieldGroup]]:
    """Pick the display name of a search record and its kind."""
    for group_name, name_type in (
        ("mainName", "Entity Name"),
        ("mainTradingName", "Trading Name"),
        ("businessName", "Business Name"),
        ("otherTradingName", "Trading Name"),
    ):
        group = groups.get(group_name)
        if group is not None:
            return group.get("organisationName"), name_type, group
    return "", "", None


def _to_search_result(record: List[FieldGroup]) -> SearchResult:
    groups: Dict[str, FieldGroup] = {}
    for group in record:
        groups.setdefault(group.name, group)

    abn = groups.get("ABN", FieldGroup("ABN"))
    address = groups.get("mainBusinessPhysicalAddress", FieldGroup("mainBusinessPhysicalAddress"))
    name, name_type, name_group = _search_name(groups)

    score = None
    if name_group is not None and name_group.get("score").isdigit():
        score = int(name_group.get("score"))

    return SearchResult(
        abn=abn.get("identifierValue"),
        status=abn.get("identifierStatus"),
        name=name,
        name_type=name_type,
        location=f"{address.get('postcode')}, {address.get('stateCode')}",
        score=score,
        is_current=name_group is not None and name_group.get("isCurrentIndicator").upper() == "Y",
    )


def map_search_results(
    records: Iterable[List[FieldGroup]],
    exception_groups: Iterable[FieldGroup] = (),
) -> Tuple[List[SearchResult], Dict[str, List[str]]]:
    """Map name search records.

    Returns:
        Tuple of (search_results, exceptions).
    """
    results = [_to_search_result(record) for record in records]
    exceptions: Dict[str, List[str]] = {}
    for group in exception_groups:
        exceptions.setdefault(group.get("exceptionCode"), []).append(
            group.get("exceptionDescription")
        )
    return results, exceptions
