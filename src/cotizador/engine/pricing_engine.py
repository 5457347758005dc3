"""
Pricing Engine - quote resolution pipeline with traceability.

Pipeline (one way, pure):
1. Resolve zone (postal code → province/city → country default)
2. Price each requested line by its pricing unit
3. Bundle isolated vehicle items (max price + differential)
4. Select at most one discount (dynamic rules → zone)
5. Clamp to the country minimum charge
6. Assemble breakdown, notes and summary
"""
import logging
from typing import Iterable, Mapping, Optional

from ..config.countries import COUNTRIES, CountryConfig, get_country
from .bundling import bundle_isolated_items
from .formatting import format_money
from .line_pricer import price_lines
from .models import (
    DiscountRule,
    LineItem,
    PostalCode,
    QuoteDetail,
    QuoteError,
    QuoteInput,
    QuoteOutcome,
    QuoteResult,
    Service,
    ServiceCategory,
    TraceStep,
    Zone,
)
from .rule_matcher import DiscountSelection, RuleMatcher
from .zone_resolver import resolve_zone

logger = logging.getLogger(__name__)

FIXED_NOTES = (
    "El tiempo de secado estimado es de 4 a 8 horas, según ventilación y tipo de tela.",
    "No se garantiza la remoción total de manchas preexistentes o de larga data.",
    "El valor final está sujeto a confirmación in situ por el operario.",
)
ZONE_EXCLUSION_NOTE = "El descuento de zona no aplica a servicios de Estética Vehicular."


class PricingEngine:
    """
    Computes quotes from in-memory table snapshots.

    The engine holds only the immutable country table; every call receives
    the tables it prices against, so refreshing data never touches the engine.
    """

    def __init__(self, countries: Mapping[str, CountryConfig] = COUNTRIES):
        self.countries = countries

    def calculate(
        self,
        quote_input: QuoteInput,
        services: Iterable[Service],
        zones: Iterable[Zone],
        postal_codes: Iterable[PostalCode],
        discount_rules: Iterable[DiscountRule] = (),
    ) -> Optional[QuoteOutcome]:
        """
        Calculate a quote with full traceability.

        Returns None for a request with no items, otherwise a QuoteOutcome
        holding either the result or the error that stopped the calculation.
        """
        if not quote_input.items:
            return None

        trace: list[TraceStep] = []
        country = get_country(quote_input.pais, self.countries)
        if country is None:
            logger.info("unknown country %r", quote_input.pais)
            return QuoteOutcome.failure(QuoteError.ZONE_NOT_FOUND)

        # 1. Zone
        resolution = resolve_zone(quote_input, zones, postal_codes, country)
        _extend(trace, resolution.trace)
        if resolution.error:
            return QuoteOutcome.failure(resolution.error)
        zone = resolution.zone

        # 2. Lines
        country_services = [s for s in services if s.pais == country.code]
        sellable = [s for s in country_services if s.active]
        priced = price_lines(quote_input.items, sellable)
        _extend(trace, priced.trace)
        if priced.missing_service_id is not None:
            logger.info("service %s not found", priced.missing_service_id, extra={'pais': country.code})
            return QuoteOutcome.failure(QuoteError.SERVICE_NOT_FOUND)

        # 3. Bundling
        bundle = bundle_isolated_items(priced.lines, country_services)
        _extend(trace, bundle.trace)
        lines = bundle.lines
        subtotal = sum(line.base_price for line in lines)
        trace.append(TraceStep("Subtotal", "Workload subtotal", f"{subtotal:g}"))

        # 4. Discount
        selection = RuleMatcher(discount_rules).select_discount(
            pais=country.code,
            payment_method=quote_input.payment_method,
            zone=zone,
            lines=lines,
            subtotal=subtotal,
        )
        _extend(trace, selection.trace)

        # 5. Minimum charge
        price_after_discount = selection.price_after_discount
        minimum_charge_applied = 0.0
        final_price = price_after_discount
        if price_after_discount < country.minimum_charge:
            minimum_charge_applied = country.minimum_charge - price_after_discount
            final_price = country.minimum_charge
            trace.append(TraceStep("Minimum Charge", f"Raised to country minimum {country.minimum_charge:g}",
                                   f"+{minimum_charge_applied:g}"))

        detail = QuoteDetail(
            workload_subtotal=subtotal,
            applied_discount=selection.applied,
            price_after_discount=price_after_discount,
            minimum_charge_applied=minimum_charge_applied,
            final_price=final_price,
            zone_id=zone.zone_id,
            moneda=country.currency,
            items=lines,
            operary_name=zone.operary_name,
            trace=trace,
        )
        return QuoteOutcome.success(self._assemble(detail, zone, country, selection))

    def _assemble(self, detail: QuoteDetail, zone: Zone, country: CountryConfig,
                  selection: DiscountSelection) -> QuoteResult:
        """Build notes and the one-line summary around a computed detail."""
        notes = list(FIXED_NOTES)
        if detail.minimum_charge_applied > 0:
            notes.append(
                f"Se aplicó el cargo mínimo del servicio ({format_money(country.minimum_charge, country.currency)})."
            )
        if selection.applied and selection.applied.type == 'ZONE_GENERAL' and _has_aesthetics(detail.items):
            notes.append(ZONE_EXCLUSION_NOTE)

        return QuoteResult(
            min=detail.final_price,
            max=detail.final_price,
            detail=detail,
            notes=notes,
            summary=build_summary(detail.items, zone, country, detail.final_price),
        )


def build_summary(lines: list[LineItem], zone: Zone, country: CountryConfig, final_price: float) -> str:
    service_list = ', '.join(line.service.subservicio for line in lines)
    if country.default_zone_id and zone.zone_id == country.default_zone_id:
        location = country.default_location_label
    else:
        location = zone.ciudad
    return (
        f"Cotización para {service_list} en {location}: "
        f"{format_money(final_price, country.currency)}. Valor final sujeto a confirmación in situ."
    )


def calculate_quote(
    quote_input: QuoteInput,
    services: Iterable[Service],
    zones: Iterable[Zone],
    postal_codes: Iterable[PostalCode],
    discount_rules: Iterable[DiscountRule] = (),
) -> Optional[QuoteOutcome]:
    """Calculate a quote with the default country table."""
    return PricingEngine().calculate(quote_input, services, zones, postal_codes, discount_rules)


def _has_aesthetics(lines: list[LineItem]) -> bool:
    return any(line.service.categoria == ServiceCategory.VEHICLE_AESTHETICS for line in lines)


def _extend(trace: list[TraceStep], steps: list[tuple]) -> None:
    for step, description, value in steps:
        trace.append(TraceStep(step=step, description=description, value=value))
