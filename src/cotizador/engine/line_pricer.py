"""
Line-Item Pricer - computes a base price for each requested service.
"""
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .models import LineItem, QuoteItem, Service, ServiceUnit


@dataclass
class PricedLines:
    """Priced lines in input order, or the id that could not be resolved."""
    lines: list[LineItem] = field(default_factory=list)
    missing_service_id: Optional[str] = None
    trace: list[tuple] = field(default_factory=list)


def line_base_price(service: Service, quantity: float) -> float:
    """Base price of a single line according to the service's pricing unit."""
    if service.unidad == ServiceUnit.SQUARE_METER:
        return max(service.min_cargo or 0, (service.tasa_m2 or 0) * quantity)
    return service.precio_base * quantity


def price_lines(items: Iterable[QuoteItem], services: Iterable[Service]) -> PricedLines:
    """
    Price every requested item.

    `services` must already be filtered to the quote's country and to
    sellable (active) rows. Stops at the first unknown id.
    """
    by_id = {}
    for service in services:
        # First row wins on duplicate ids
        by_id.setdefault(service.servicio_id, service)

    priced = PricedLines()
    for item in items:
        service = by_id.get(item.service_id)
        if service is None:
            priced.missing_service_id = item.service_id
            priced.trace.append(("Service Lookup", "Service not found", item.service_id))
            return priced

        base_price = line_base_price(service, item.quantity)
        priced.lines.append(LineItem(service=service, quantity=item.quantity, base_price=base_price))

        if service.unidad == ServiceUnit.SQUARE_METER:
            desc = f"{service.subservicio}: {item.quantity} m2 × {service.tasa_m2 or 0:g} (min {service.min_cargo or 0:g})"
        else:
            desc = f"{service.subservicio}: {item.quantity} × {service.precio_base:g}"
        priced.trace.append(("Line Price", desc, f"{base_price:g}"))

    return priced
