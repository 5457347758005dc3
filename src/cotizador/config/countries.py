"""
Per-country pricing constants.

The table is read-only; the engine receives it at construction time.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional


@dataclass(frozen=True)
class CountryConfig:
    """Constants the engine needs for one country."""
    code: str
    currency: str
    rounding: int  # display granularity for price ranges
    minimum_charge: float
    default_zone_id: Optional[str] = None  # synthetic zone when no location resolves
    default_location_label: str = ""


COUNTRIES: Mapping[str, CountryConfig] = MappingProxyType({
    'AR': CountryConfig(
        code='AR',
        currency='ARS',
        rounding=100,
        minimum_charge=27999,
    ),
    'BO': CountryConfig(
        code='BO',
        currency='Bs',
        rounding=1,
        minimum_charge=150,
        default_zone_id='BOLIVIA_GENERAL',
        default_location_label='Bolivia',
    ),
})


def get_country(code: str, countries: Mapping[str, CountryConfig] = COUNTRIES) -> Optional[CountryConfig]:
    """Look up a country by code (case-insensitive)."""
    return countries.get(str(code or '').strip().upper())
