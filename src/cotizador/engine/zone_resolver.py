"""
Zone Resolver - maps a postal code or (province, city) pair to a Zone.

Resolution order:
1. First postal-code range (table order) containing the input CP
2. First zone whose province and city match case-insensitively
3. Country default zone (synthetic, Bolivia only)
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..config.countries import CountryConfig
from .models import PostalCode, QuoteError, QuoteInput, Zone

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')


@dataclass
class ZoneResolution:
    """Outcome of zone resolution with its trace steps."""
    zone: Optional[Zone] = None
    error: Optional[QuoteError] = None
    trace: list[tuple] = field(default_factory=list)


def parse_cp(value: str) -> Optional[int]:
    """Parse the leading integer of a postal code ('1414', '1414ABC' → 1414)."""
    match = _LEADING_INT.match(str(value or ''))
    return int(match.group(1)) if match else None


def default_zone(country: CountryConfig) -> Zone:
    """Synthetic zone used when a country allows quoting without a location."""
    return Zone(
        zone_id=country.default_zone_id,
        pais=country.code,
        provincia=country.default_location_label,
        ciudad='General',
        general_discount_pct=0.0,
        active=True,
    )


def find_zone_by_cp(cp: str, zones: list[Zone], postal_codes: list[PostalCode]) -> Optional[Zone]:
    cp_num = parse_cp(cp)
    if cp_num is None:
        return None

    for pc in postal_codes:
        low, high = parse_cp(pc.cp_from), parse_cp(pc.cp_to)
        if low is None or high is None:
            continue
        if low <= cp_num <= high:
            # First matching range wins even if its zone is missing
            return next((z for z in zones if z.zone_id == pc.zone_id), None)
    return None


def find_zone_by_location(provincia: str, ciudad: str, zones: list[Zone]) -> Optional[Zone]:
    provincia, ciudad = provincia.lower(), ciudad.lower()
    for zone in zones:
        if zone.provincia.lower() == provincia and zone.ciudad.lower() == ciudad:
            return zone
    return None


def resolve_zone(
    quote_input: QuoteInput,
    zones: Iterable[Zone],
    postal_codes: Iterable[PostalCode],
    country: CountryConfig,
) -> ZoneResolution:
    """Resolve the pricing zone for a request. Pure; never raises."""
    pais = country.code
    zones = [z for z in zones if z.pais == pais]
    postal_codes = [pc for pc in postal_codes if pc.pais == pais]
    resolution = ZoneResolution()

    zone = None
    if quote_input.cp:
        zone = find_zone_by_cp(quote_input.cp, zones, postal_codes)
        if zone:
            resolution.trace.append(("Zone Lookup", f"Postal code {quote_input.cp} in range", zone.zone_id))
        else:
            resolution.trace.append(("Zone Lookup", f"No postal range contains {quote_input.cp}", None))

    if zone is None and quote_input.provincia and quote_input.ciudad:
        zone = find_zone_by_location(quote_input.provincia, quote_input.ciudad, zones)
        label = f"{quote_input.provincia}, {quote_input.ciudad}"
        if zone:
            resolution.trace.append(("Zone Lookup", f"Matched location {label}", zone.zone_id))
        else:
            resolution.trace.append(("Zone Lookup", f"No zone for location {label}", None))

    if zone is None and country.default_zone_id:
        zone = default_zone(country)
        resolution.trace.append(("Fallback", "Using country default zone", zone.zone_id))

    if zone is None:
        logger.info("zone not found", extra={'pais': pais})
        resolution.error = QuoteError.ZONE_NOT_FOUND
        return resolution

    if not zone.active:
        logger.info("zone %s inactive", zone.zone_id, extra={'pais': pais})
        resolution.error = QuoteError.ZONE_INACTIVE
        resolution.zone = zone
        return resolution

    resolution.zone = zone
    return resolution
