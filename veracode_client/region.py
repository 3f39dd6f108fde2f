"""
Region resolution from Veracode API key ids.

Key ids issued outside the commercial region carry an 8 character prefix
followed by ``-``; the 7th character of that prefix names the region.
"""

from dataclasses import dataclass
from typing import Dict

from .exceptions import RegionResolutionError, UnknownRegionError

REGION_PREFIX_LENGTH = 8
REGION_CHARACTER_INDEX = 6
DEFAULT_REGION_MARKER = "g"


@dataclass(frozen=True)
class Region:
    """A deployment zone and its two API roots."""

    name: str
    marker: str
    rest_url: str
    xml_url: str


REGION_EUROPE = Region(
    name="europe",
    marker="e",
    rest_url="https://api.veracode.eu/",
    xml_url="https://analysiscenter.veracode.eu/",
)
REGION_FEDERAL = Region(
    name="federal",
    marker="f",
    rest_url="https://api.veracode.us/",
    xml_url="https://analysiscenter.veracode.us/",
)
REGION_COMMERCIAL = Region(
    name="commercial",
    marker="g",
    rest_url="https://api.veracode.com/",
    xml_url="https://analysiscenter.veracode.com/",
)

REGIONS: Dict[str, Region] = {
    region.marker: region
    for region in (REGION_EUROPE, REGION_FEDERAL, REGION_COMMERCIAL)
}


def get_region(marker: str) -> Region:
    """Look up a region by its marker character."""
    try:
        return REGIONS[marker.lower()]
    except KeyError:
        raise UnknownRegionError(f"region marker {marker!r} does not map to a known region") from None


def resolve_region(api_key_id: str) -> Region:
    """
    Resolve the region that issued ``api_key_id``.

    Key ids without a ``-`` separator belong to the commercial region.
    Unknown region characters fail closed.

    Raises:
        RegionResolutionError: If the prefix is not exactly 8 characters
        UnknownRegionError: If the region character is not in REGIONS
    """
    prefix, sep, _ = api_key_id.partition('-')
    if not sep:
        return REGIONS[DEFAULT_REGION_MARKER]

    if len(prefix) != REGION_PREFIX_LENGTH:
        raise RegionResolutionError("credential starts with an invalid prefix")

    marker = prefix[REGION_CHARACTER_INDEX].lower()
    if marker not in REGIONS:
        raise UnknownRegionError("credential does not map to a known region")

    return REGIONS[marker]
