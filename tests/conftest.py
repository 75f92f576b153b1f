"""Pytest fixtures and test configuration."""

import os
from datetime import date
from pathlib import Path

import pytest


FIXTURES_DIR = Path(__file__).parent / "fixtures"

# Fixed evaluation date so current-value resolution is deterministic
AS_OF = date(2024, 1, 1)


def load_fixture(name: str) -> str:
    with open(FIXTURES_DIR / name, encoding="utf-8") as f:
        return f.read()


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def successful_xml():
    """Sole trader response."""
    return load_fixture("successful.xml")


@pytest.fixture
def successful_company_xml():
    """Family partnership response."""
    return load_fixture("successful_company.xml")


@pytest.fixture
def failed_abn_xml():
    return load_fixture("failed_abn.xml")


@pytest.fixture
def failed_guid_xml():
    return load_fixture("failed_guid.xml")


@pytest.fixture
def name_search_xml():
    return load_fixture("name_search.xml")


@pytest.fixture
def abr_guid():
    """Set ABR_GUID for the duration of a test."""
    old_guid = os.environ.get("ABR_GUID")
    os.environ["ABR_GUID"] = "test-guid-123"
    yield "test-guid-123"
    if old_guid is None:
        os.environ.pop("ABR_GUID", None)
    else:
        os.environ["ABR_GUID"] = old_guid


@pytest.fixture
def no_abr_guid():
    """Unset ABR_GUID for the duration of a test."""
    old_guid = os.environ.pop("ABR_GUID", None)
    yield
    if old_guid is not None:
        os.environ["ABR_GUID"] = old_guid
