import pytest

from conftest import make_input
from cotizador.config.countries import COUNTRIES
from cotizador.engine.models import PostalCode, QuoteError, Zone
from cotizador.engine.zone_resolver import parse_cp, resolve_zone

AR = COUNTRIES['AR']
BO = COUNTRIES['BO']


def resolve(zones, postal_codes, country=AR, **location):
    quote_input = make_input(('veh_std_basico_ar', 1), pais=country.code, **location)
    return resolve_zone(quote_input, zones, postal_codes, country)


@pytest.mark.parametrize("raw,expected", [
    ("1414", 1414),
    ("1414ABC", 1414),
    (" 7600 ", 7600),
    ("B1900", None),
    ("", None),
])
def test_parse_cp(raw, expected):
    assert parse_cp(raw) == expected


def test_postal_code_resolves_zone(zones, postal_codes):
    resolution = resolve(zones, postal_codes, cp="1414")
    assert resolution.error is None
    assert resolution.zone.zone_id == "CABA"


def test_postal_code_takes_precedence_over_location(zones, postal_codes):
    """A matching CP wins even when province/city point at another zone."""
    resolution = resolve(zones, postal_codes, cp="1414", provincia="Buenos Aires", ciudad="La Plata")
    assert resolution.zone.zone_id == "CABA"


def test_unmatched_postal_code_falls_back_to_location(zones, postal_codes):
    resolution = resolve(zones, postal_codes, cp="9999", provincia="Buenos Aires", ciudad="La Plata")
    assert resolution.zone.zone_id == "LA_PLATA"


def test_location_match_is_case_insensitive(zones, postal_codes):
    resolution = resolve(zones, postal_codes, provincia="BUENOS AIRES", ciudad="mar del plata")
    assert resolution.zone.zone_id == "MAR_DEL_PLATA"


def test_first_matching_range_wins_even_without_zone(zones):
    """Later overlapping ranges are never consulted."""
    postal_codes = [
        PostalCode('AR', '1000', '1099', 'ZONA_BORRADA'),
        PostalCode('AR', '1000', '1499', 'CABA'),
    ]
    resolution = resolve(zones, postal_codes, cp="1050")
    assert resolution.error == QuoteError.ZONE_NOT_FOUND


def test_overlapping_ranges_use_table_order(zones):
    postal_codes = [
        PostalCode('AR', '1900', '1999', 'LA_PLATA'),
        PostalCode('AR', '1800', '1999', 'CABA'),
    ]
    assert resolve(zones, postal_codes, cp="1950").zone.zone_id == "LA_PLATA"


def test_inactive_zone_is_reported(zones, postal_codes):
    resolution = resolve(zones, postal_codes, cp="7050")
    assert resolution.error == QuoteError.ZONE_INACTIVE
    assert resolution.zone.zone_id == "TANDIL"


def test_argentina_without_location_is_not_found(zones, postal_codes):
    resolution = resolve(zones, postal_codes)
    assert resolution.zone is None
    assert resolution.error == QuoteError.ZONE_NOT_FOUND


def test_bolivia_without_location_uses_default_zone(zones, postal_codes):
    resolution = resolve(zones, postal_codes, country=BO)
    assert resolution.error is None
    assert resolution.zone.zone_id == "BOLIVIA_GENERAL"
    assert resolution.zone.ciudad == "General"
    assert resolution.zone.general_discount_pct == 0.0
    assert resolution.zone.active


def test_bolivia_postal_code_resolves_real_zone(zones, postal_codes):
    assert resolve(zones, postal_codes, country=BO, cp="2500").zone.zone_id == "LA_PAZ_BO"


def test_zones_of_other_countries_are_ignored(zones, postal_codes):
    """An Argentine CP never resolves for a Bolivian quote."""
    resolution = resolve(zones, postal_codes, country=BO, cp="1414")
    assert resolution.zone.zone_id == "BOLIVIA_GENERAL"


def test_trace_records_lookup(zones, postal_codes):
    resolution = resolve(zones, postal_codes, cp="1414")
    assert resolution.trace[0][0] == "Zone Lookup"
    assert resolution.trace[0][2] == "CABA"


def test_extra_zone_without_postal_range(postal_codes):
    zones = [Zone('NEUQUEN', 'AR', 'Neuquén', 'Neuquén')]
    assert resolve(zones, postal_codes, provincia="neuquén", ciudad="NEUQUÉN").zone.zone_id == "NEUQUEN"
