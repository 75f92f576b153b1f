"""XML extraction for ABR XML search responses.

Turns the SOAP-less XML payload returned by the ABR web service into ordered
``FieldGroup`` records. Namespaces are stripped so lookups use bare element
names, as they appear in the ABR documentation.
"""

import logging
import xml.etree.ElementTree as ET
from typing import List, Tuple, Union

from abr_lookup.registry.models import FieldGroup


logger = logging.getLogger(__name__)


# Elements of a business entity record that become field groups
ENTITY_GROUPS = (
    "ABN",
    "entityStatus",
    "entityType",
    "goodsAndServicesTax",
    "legalName",
    "mainName",
    "mainTradingName",
    "businessName",
    "mainBusinessPhysicalAddress",
    "exception",
)

SEARCH_RECORD_GROUPS = (
    "ABN",
    "mainName",
    "mainTradingName",
    "businessName",
    "otherTradingName",
    "legalName",
    "mainBusinessPhysicalAddress",
)


class ABRParseError(Exception):
    """Raised when the response body is not XML."""
    pass


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _parse_document(xml_text: Union[str, bytes]) -> ET.Element:
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise ABRParseError(f"Failed to parse ABR response: {e}")

    for element in root.iter():
        if isinstance(element.tag, str):
            element.tag = _local_name(element.tag)
    return root


def _to_group(element: ET.Element) -> FieldGroup:
    """Flatten an element's descendants into trimmed field text."""
    fields = {}
    for child in element.iter():
        if child is element:
            continue
        # First occurrence wins for repeated leaf names
        fields.setdefault(child.tag, (child.text or "").strip())
    return FieldGroup(name=element.tag, fields=fields)


def _collect_groups(node: ET.Element, names) -> List[FieldGroup]:
    groups = []
    for element in node.iter():
        if element is not node and element.tag in names:
            groups.append(_to_group(element))
    return groups


def extract_field_groups(xml_text: Union[str, bytes]) -> List[FieldGroup]:
    """Extract field groups from an ABN or ASIC search response.

    Args:
        xml_text: Raw response body.

    Returns:
        Field groups in document order.

    Raises:
        ABRParseError: If the body is not well-formed XML.
    """
    root = _parse_document(xml_text)

    groups = []
    responses = [root] if root.tag == "response" else list(root.iter("response"))
    for response in responses:
        groups.extend(_collect_groups(response, ENTITY_GROUPS))

    logger.debug("Extracted %d field groups from ABR response", len(groups))
    return groups


def extract_search_records(xml_text: Union[str, bytes]) -> Tuple[List[List[FieldGroup]], List[FieldGroup]]:
    """Extract name search records.

    Returns:
        Tuple of (records, exception_groups) where each record is the list of
        field groups of one ``searchResultsRecord``.

    Raises:
        ABRParseError: If the body is not well-formed XML.
    """
    root = _parse_document(xml_text)

    records = [
        _collect_groups(record, SEARCH_RECORD_GROUPS)
        for record in root.iter("searchResultsRecord")
    ]
    exceptions = [_to_group(e) for e in root.iter("exception")]

    logger.debug("Extracted %d search records from ABR response", len(records))
    return records, exceptions
