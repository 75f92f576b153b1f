"""Data models for ABR registry records.

Every temporal category (status, address, GST, names) is an effective-dated
record: a payload plus a validity window. The registry returns the full
history of each category; the "current" value is resolved against an
explicit evaluation date.
"""

import re
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple, TypeVar


@dataclass
class FieldGroup:
    """One named element of the registry response, flattened to field text."""
    name: str
    fields: Dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str:
        """Return the trimmed text of a field, or an empty string."""
        return self.fields.get(key, "")


@dataclass
class EffectiveRecord:
    """A value valid from ``effective_from`` until ``effective_to`` (inclusive)."""
    effective_from: date
    effective_to: Optional[date] = None

    def is_active(self, as_of: date) -> bool:
        """Check whether the validity window contains ``as_of``."""
        if self.effective_from > as_of:
            return False
        return self.effective_to is None or self.effective_to >= as_of

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dict for the history view."""
        return asdict(self)


@dataclass
class Status(EffectiveRecord):
    status_code: str = ""


@dataclass
class Address(EffectiveRecord):
    state_code: str = ""
    postcode: str = ""


@dataclass
class GST(EffectiveRecord):
    """GST registration period. Presence of an active record means registered."""


@dataclass
class Name(EffectiveRecord):
    """Entity name: either an organisation name or the parts of a person's name."""
    organisation_name: Optional[str] = None
    given_name: Optional[str] = None
    other_given_name: Optional[str] = None
    family_name: Optional[str] = None

    @property
    def name(self) -> str:
        """Display name."""
        if self.organisation_name:
            return self.organisation_name
        parts = [self.given_name, self.other_given_name, self.family_name]
        joined = " ".join(p for p in parts if p)
        return re.sub(r"\s+", " ", joined).strip()


@dataclass(frozen=True)
class ABN:
    identifier: str = ""
    is_current: str = ""

    def current(self) -> bool:
        return re.search(r"y", self.is_current or "", re.I) is not None


@dataclass(frozen=True)
class EntityType:
    code: str = ""
    description: str = ""


R = TypeVar("R", bound=EffectiveRecord)


def active_subset(records: Sequence[R], as_of: date) -> List[R]:
    """Return the records active on ``as_of``, keeping response order."""
    return [record for record in records if record.is_active(as_of)]


def current(records: Sequence[R], as_of: date) -> Optional[R]:
    """Return the first active record in response order.

    The registry lists the authoritative record first, so this is the first
    match and not the most recent ``effective_from``.
    """
    for record in records:
        if record.is_active(as_of):
            return record
    return None


@dataclass(frozen=True)
class Entity:
    """All registry data for one ABN, with history per category.

    A read-only snapshot built once by the response mapper.
    """
    abn: ABN = field(default_factory=ABN)
    entity_type: EntityType = field(default_factory=EntityType)
    statuses: Tuple[Status, ...] = ()
    addresses: Tuple[Address, ...] = ()
    gsts: Tuple[GST, ...] = ()
    main_names: Tuple[Name, ...] = ()
    legal_names: Tuple[Name, ...] = ()
    trading_names: Tuple[Name, ...] = ()
    business_names: Tuple[Name, ...] = ()

    def current_status(self, as_of: date) -> Optional[Status]:
        return current(self.statuses, as_of)

    def current_address(self, as_of: date) -> Optional[Address]:
        return current(self.addresses, as_of)

    def current_name(self, as_of: date) -> Optional[Name]:
        """Current main name, falling back to the current legal name."""
        main_name = current(self.main_names, as_of)
        if main_name is not None:
            return main_name
        return current(self.legal_names, as_of)

    def current_gst_status(self, as_of: date) -> bool:
        return bool(active_subset(self.gsts, as_of))

    def current_trading_names(self, as_of: date) -> List[Name]:
        return active_subset(self.trading_names, as_of)

    def current_business_names(self, as_of: date) -> List[Name]:
        return active_subset(self.business_names, as_of)

    def identifier_is_current(self) -> bool:
        return self.abn.current()

    def to_dict(self) -> Dict[str, Any]:
        """Full history view: every record of every category, in response order."""
        return {
            "abn": asdict(self.abn),
            "entity_type": asdict(self.entity_type),
            "statuses": [r.to_dict() for r in self.statuses],
            "addresses": [r.to_dict() for r in self.addresses],
            "gsts": [r.to_dict() for r in self.gsts],
            "main_names": [r.to_dict() for r in self.main_names],
            "legal_names": [r.to_dict() for r in self.legal_names],
            "trading_names": [r.to_dict() for r in self.trading_names],
            "business_names": [r.to_dict() for r in self.business_names],
        }


@dataclass
class SearchResult:
    """One match from a name search."""
    abn: str = ""
    status: str = ""
    name: str = ""
    name_type: str = ""
    location: str = ""
    score: Optional[int] = None
    is_current: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
