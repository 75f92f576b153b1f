"""ABR (Australian Business Register) XML search API client.

ABR Web Services Documentation:
- Base URL: https://abr.business.gov.au/abrxmlsearch/AbrXmlSearch.asmx
- Requires an authentication GUID obtained by registering at abr.business.gov.au
- Lookup by ABN (SearchByABNv201205), ACN (SearchByASICv201408) or by name
  (ABRSearchByNameSimpleProtocol)
- Returns XML; errors such as an invalid ABN or unknown GUID are reported
  inside a normal 200 response as <exception> elements

Environment Variables:
- ABR_GUID: Authentication GUID (required)
- ABR_API_BASE_URL: Override default API base URL (optional)
- ABR_REQUEST_TIMEOUT: Request timeout in seconds (default: 30)
"""

import logging
import os
import re
from typing import Dict, Iterable, Optional, Tuple

import requests
from dotenv import load_dotenv
from requests.exceptions import RequestException, Timeout


# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


# Default configuration
DEFAULT_ABR_API_BASE_URL = "https://abr.business.gov.au/abrxmlsearch/AbrXmlSearch.asmx"
DEFAULT_TIMEOUT = 30

ABN_SEARCH_METHOD = "SearchByABNv201205"
ASIC_SEARCH_METHOD = "SearchByASICv201408"
NAME_SEARCH_METHOD = "ABRSearchByNameSimpleProtocol"

STATE_CODES = ("NSW", "SA", "ACT", "VIC", "WA", "NT", "QLD", "TAS")


class ABRClientError(Exception):
    """Base exception for ABR client errors."""
    pass


class ABRNotConfiguredError(ABRClientError):
    """Raised when the ABR GUID is not configured."""
    pass


class ABRConnectionError(ABRClientError):
    """Raised on network/connection errors."""
    pass


def get_abr_config() -> Tuple[str, str, int]:
    """Get ABR API configuration from environment.

    Returns:
        Tuple of (base_url, guid, timeout_seconds).

    Raises:
        ABRNotConfiguredError: If the GUID is not configured.
    """
    base_url = os.environ.get("ABR_API_BASE_URL", DEFAULT_ABR_API_BASE_URL)
    guid = os.environ.get("ABR_GUID", "")
    timeout = int(os.environ.get("ABR_REQUEST_TIMEOUT", DEFAULT_TIMEOUT))

    if not guid:
        raise ABRNotConfiguredError(
            "ABR lookup not configured.\n"
            "Please set ABR_GUID environment variable.\n"
            "You can register for a free GUID at: https://abr.business.gov.au/Tools/WebServices"
        )

    return base_url.rstrip("/"), guid, timeout


def is_abr_configured() -> bool:
    """Check if the ABR GUID is set."""
    return bool(os.environ.get("ABR_GUID"))


def sanitize_lookup_number(value) -> str:
    """Strip everything but letters and digits from a lookup key.

    Args:
        value: ABN, ACN or any value convertible to str.

    Returns:
        The key with whitespace, punctuation and underscores removed.
    """
    return re.sub(r"[^\w]|_", "", str(value))


def _get(method: str, params: Dict[str, str]) -> bytes:
    """Perform a GET against an ABR search method and return the raw XML body.

    Raises:
        ABRNotConfiguredError: If the GUID is not set.
        ABRConnectionError: On network errors.
        ABRClientError: On a non-200 response.
    """
    base_url, guid, timeout = get_abr_config()

    url = f"{base_url}/{method}"
    params = dict(params, authenticationGuid=guid)

    logger.debug("GET %s %s", url, {k: v for k, v in params.items() if k != "authenticationGuid"})

    try:
        response = requests.get(url, params=params, timeout=timeout)
    except Timeout:
        raise ABRConnectionError(
            f"Request to ABR API timed out after {timeout} seconds"
        )
    except RequestException as e:
        raise ABRConnectionError(f"Failed to connect to ABR API: {e}")

    if response.status_code != 200:
        raise ABRClientError(
            f"ABR API returned status {response.status_code}: {response.text[:200]}"
        )

    return response.content


def fetch_abn_xml(lookup_number: str) -> bytes:
    """Fetch the full historical record for an ABN.

    Args:
        lookup_number: Sanitized ABN.

    Returns:
        Raw XML response body.
    """
    return _get(ABN_SEARCH_METHOD, {
        "searchString": lookup_number,
        "includeHistoricalDetails": "Y",
    })


def fetch_asic_xml(lookup_number: str) -> bytes:
    """Fetch the full historical record for an ACN/ARBN.

    Args:
        lookup_number: Sanitized ACN.

    Returns:
        Raw XML response body.
    """
    return _get(ASIC_SEARCH_METHOD, {
        "searchString": lookup_number,
        "includeHistoricalDetails": "Y",
    })


def fetch_name_search_xml(
    name: str,
    postcode: Optional[str] = None,
    states: Optional[Iterable[str]] = None,
) -> bytes:
    """Search the register by name.

    Args:
        name: Name to search for.
        postcode: Optional postcode filter.
        states: Optional state codes to restrict the search to. All states
            are searched when empty.

    Returns:
        Raw XML response body.
    """
    selected = {s.upper() for s in states or ()}
    params = {
        "name": name,
        "postcode": postcode or "",
        "legalName": "",
        "tradingName": "",
    }
    for state in STATE_CODES:
        params[state] = "Y" if state in selected else ""
    return _get(NAME_SEARCH_METHOD, params)
