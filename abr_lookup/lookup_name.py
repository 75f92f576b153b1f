"""Search the register by business name."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from abr_lookup.registry.abr_client import fetch_name_search_xml
from abr_lookup.registry.mapper import map_search_results
from abr_lookup.registry.models import SearchResult
from abr_lookup.registry.parsing import extract_search_records


@dataclass
class NameLookupResult:
    lookup_name: str
    search_results: List[SearchResult] = field(default_factory=list)
    exceptions: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def has_errors(self) -> bool:
        return bool(self.exceptions)

    def error_messages(self) -> List[str]:
        return [msg for messages in self.exceptions.values() for msg in messages]

    def attributes(self) -> Dict[str, Any]:
        attrs: Dict[str, Any] = {"lookup_name": self.lookup_name}
        if self.has_errors:
            attrs["errors"] = ", ".join(self.error_messages())
        else:
            attrs["search_results"] = [r.to_dict() for r in self.search_results]
        return attrs


def name_lookup_from_xml(lookup_name: str, xml_text: Union[str, bytes]) -> NameLookupResult:
    """Map a raw name search response body into a NameLookupResult."""
    records, exception_groups = extract_search_records(xml_text)
    results, exceptions = map_search_results(records, exception_groups)
    return NameLookupResult(
        lookup_name=lookup_name,
        search_results=results,
        exceptions=exceptions,
    )


def lookup_name(
    name: str,
    postcode: Optional[str] = None,
    states: Optional[Iterable[str]] = None,
) -> NameLookupResult:
    """Search the register by name.

    Args:
        name: Name to search for. Surrounding whitespace is ignored.
        postcode: Optional postcode filter.
        states: Optional state codes to restrict the search to.

    Raises:
        ABRClientError: On transport or configuration errors.
    """
    lookup_name = str(name).strip()
    xml_text = fetch_name_search_xml(lookup_name, postcode=postcode, states=states)
    return name_lookup_from_xml(lookup_name, xml_text)
