"""
Catalog Loader - turns exported sheet tables into typed engine records.

All spreadsheet quirks live here (alternate header spellings, Spanish
booleans, free-text units); the engine only ever sees typed tables.
Produces a build report alongside the snapshot.
"""
import hashlib
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from ..config.settings import get_settings, Settings
from ..engine.models import (
    DiscountRule,
    PostalCode,
    Service,
    ServiceCategory,
    ServiceUnit,
    Zone,
)
from ..engine.rule_matcher import normalize

logger = logging.getLogger(__name__)

TRUE_VALUES = ('true', 'verdadero')
_LEADING_FLOAT = re.compile(r'^\s*([+-]?(\d+(\.\d*)?|\.\d+))')
_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')
_CATEGORIES = {normalize(c.value): c for c in ServiceCategory}


@dataclass(frozen=True)
class TableSnapshot:
    """Immutable set of tables a quote is priced against."""
    services: tuple[Service, ...] = ()
    zones: tuple[Zone, ...] = ()
    postal_codes: tuple[PostalCode, ...] = ()
    discount_rules: tuple[DiscountRule, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.services and self.zones)

    def counts(self) -> dict:
        return {
            "services": len(self.services),
            "zones": len(self.zones),
            "postal_codes": len(self.postal_codes),
            "discount_rules": len(self.discount_rules),
        }


def get_file_hash(path: Path) -> str:
    """Get SHA256 hash of a file."""
    if not path.exists():
        return ""
    with open(path, 'rb') as f:
        return hashlib.sha256(f.read()).hexdigest()[:12]


def parse_bool(value) -> bool:
    """Parse a sheet boolean ('TRUE', 'true', 'VERDADERO')."""
    return str(value or '').strip().lower() in TRUE_VALUES


def parse_float(value, default: float = 0.0) -> float:
    """Parse the leading number of a cell ('0.10', '12 m2'); default when none."""
    match = _LEADING_FLOAT.match(str(value or ''))
    return float(match.group(1)) if match else default


def parse_optional_float(value) -> Optional[float]:
    if not str(value or '').strip():
        return None
    match = _LEADING_FLOAT.match(str(value))
    return float(match.group(1)) if match else None


def parse_int(value, default: int = 0) -> int:
    match = _LEADING_INT.match(str(value or ''))
    return int(match.group(1)) if match else default


def parse_optional_str(value) -> Optional[str]:
    """Parse optional string (empty or 'undefined' = None)."""
    text = str(value or '').strip()
    if not text or text == 'undefined':
        return None
    return text


def parse_unit(value) -> ServiceUnit:
    lower = str(value or '').lower()
    if 'm2' in lower or 'metro' in lower:
        return ServiceUnit.SQUARE_METER
    if 'pieza' in lower:
        return ServiceUnit.PIECE
    return ServiceUnit.UNIT


def parse_category(value, warnings: Optional[list] = None) -> ServiceCategory:
    """Match a category label ignoring accents and case; unknown → Otros."""
    category = _CATEGORIES.get(normalize(str(value or '').strip()))
    if category is None:
        if warnings is not None:
            warnings.append(f"Unknown category '{value}' mapped to {ServiceCategory.OTHER.value}")
        return ServiceCategory.OTHER
    return category


def first_value(row: dict, *keys: str) -> str:
    """First non-empty value among alternative column spellings."""
    for key in keys:
        value = row.get(key)
        if value is not None and str(value).strip() != '':
            return str(value).strip()
    return ''


def read_table(path: Path) -> list[dict]:
    """Read a CSV export as string cells, blanks as ''."""
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [str(c).strip() for c in df.columns]
    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()
    return df.to_dict(orient='records')


def map_services(rows: list[dict], warnings: Optional[list] = None) -> list[Service]:
    services = []
    for row in rows:
        servicio_id = first_value(row, 'servicio_id')
        if not servicio_id:
            continue
        services.append(Service(
            servicio_id=servicio_id,
            pais=(first_value(row, 'pais') or 'AR').upper(),
            moneda=first_value(row, 'moneda') or 'ARS',
            servicio=first_value(row, 'servicio'),
            subservicio=first_value(row, 'tipo', 'subservicio'),
            categoria=parse_category(row.get('categoria'), warnings),
            unidad=parse_unit(first_value(row, 'tipo_de_precio', 'unidad')),
            precio_base=parse_float(row.get('precio_base')),
            diferencial_id=parse_optional_str(row.get('diferencial_id')),
            notas=parse_optional_str(row.get('notas')),
            active=parse_bool(row.get('active')),
            tasa_m2=parse_optional_float(row.get('tasa_m2')),
            min_cargo=parse_optional_float(row.get('min_cargo')),
        ))
    return services


def map_extras(rows: list[dict], warnings: Optional[list] = None) -> list[Service]:
    """Extras sheet rows become AR per-unit services."""
    extras = []
    for index, row in enumerate(rows):
        lowered = {str(k).lower(): v for k, v in row.items()}
        extras.append(Service(
            servicio_id=first_value(lowered, 'codigo_extra') or f"extra_{index}",
            pais='AR',
            moneda='ARS',
            servicio='Extra',
            subservicio=first_value(lowered, 'nombre', 'subservicio') or 'Extra sin nombre',
            categoria=parse_category(first_value(lowered, 'categoria_base', 'categoria') or 'Otros', warnings),
            unidad=ServiceUnit.UNIT,
            precio_base=parse_float(first_value(lowered, 'precio', 'precio_base')),
            notas=parse_optional_str(first_value(lowered, 'nota', 'notas')),
            active=parse_bool(first_value(lowered, 'activo', 'active')),
        ))
    return extras


def map_zones(rows: list[dict]) -> list[Zone]:
    zones = []
    for row in rows:
        zone_id = first_value(row, 'zone_id')
        if not zone_id:
            continue
        zones.append(Zone(
            zone_id=zone_id,
            pais=(first_value(row, 'pais') or 'AR').upper(),
            provincia=first_value(row, 'provincia'),
            ciudad=first_value(row, 'ciudad'),
            general_discount_pct=parse_float(first_value(row, 'ajuste_de_precio', 'general_discount_pct')),
            active=parse_bool(row.get('active')),
            operary_name=parse_optional_str(first_value(row, 'nombre_operario', 'operary_name')),
        ))
    return zones


def map_postal_codes(rows: list[dict]) -> list[PostalCode]:
    return [
        PostalCode(
            pais=(first_value(row, 'pais') or 'AR').upper(),
            cp_from=first_value(row, 'cp_from'),
            cp_to=first_value(row, 'cp_to'),
            zone_id=first_value(row, 'zone_id'),
        )
        for row in rows
        if first_value(row, 'zone_id')
    ]


def map_discounts(rows: list[dict]) -> list[DiscountRule]:
    rules = []
    for row in rows:
        rule = DiscountRule(
            pais=(first_value(row, 'pais') or 'AR').upper(),
            category=first_value(row, 'category'),
            min_qty=parse_int(row.get('min_qty')),
            discount_pct=parse_float(row.get('discount_pct')),
            active=parse_bool(row.get('active')),
            description=parse_optional_str(row.get('description')),
        )
        if rule.category and rule.min_qty > 0:
            rules.append(rule)
    return rules


def load_tables(settings: Optional[Settings] = None) -> tuple[TableSnapshot, dict]:
    """
    Load all tables from the configured data directory.

    Args:
        settings: Optional settings override

    Returns:
        (snapshot, build report). On failure the snapshot is empty and the
        report status is "failed".
    """
    settings = settings or get_settings()

    report = {
        "timestamp": datetime.now().isoformat(),
        "status": "pending",
        "input_files": {},
        "metrics": {},
        "warnings": [],
        "errors": []
    }

    sources = {
        'services_csv': settings.services_csv,
        'extras_csv': settings.extras_csv,
        'zones_csv': settings.zones_csv,
        'postal_codes_csv': settings.postal_codes_csv,
        'discounts_csv': settings.discounts_csv,
    }

    tables = {}
    for name, path in sources.items():
        if not path.exists():
            if name in settings.required_tables:
                report["errors"].append(f"CRITICAL ERROR: {path} not found.")
            else:
                report["warnings"].append(f"WARNING: {path.name} not found, skipping")
            tables[name] = []
            continue

        report["input_files"][name] = {"path": str(path), "hash": get_file_hash(path)}
        try:
            tables[name] = read_table(path)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            msg = f"ERROR: Failed to process {path}. {e}"
            if name in settings.required_tables:
                report["errors"].append(msg)
            else:
                report["warnings"].append(msg)
            tables[name] = []

    if report["errors"]:
        report["status"] = "failed"
        for error in report["errors"]:
            logger.error(error)
        return TableSnapshot(), report

    services = map_services(tables['services_csv'], report["warnings"])
    extras = map_extras(tables['extras_csv'], report["warnings"])
    zones = map_zones(tables['zones_csv'])
    postal_codes = map_postal_codes(tables['postal_codes_csv'])
    discounts = map_discounts(tables['discounts_csv'])

    snapshot = TableSnapshot(
        services=tuple(services + extras),
        zones=tuple(zones),
        postal_codes=tuple(postal_codes),
        discount_rules=tuple(discounts),
    )

    report["metrics"] = {
        **snapshot.counts(),
        "extras": len(extras),
        "dropped_services": len(tables['services_csv']) - len(services),
        "dropped_discount_rules": len(tables['discounts_csv']) - len(discounts),
    }

    if snapshot.is_empty:
        report["errors"].append("No services or zones loaded")
        report["status"] = "failed"
        return TableSnapshot(), report

    report["status"] = "success"
    logger.info("tables loaded: %s", snapshot.counts())
    for warning in report["warnings"]:
        logger.warning(warning)
    return snapshot, report
