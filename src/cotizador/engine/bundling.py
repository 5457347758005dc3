"""
Bundle Rule Engine - merges isolated vehicle items into one composite line.

Two or more isolated items are charged as the most expensive one plus a
flat differential surcharge for the vehicle class.
"""
from dataclasses import dataclass, field
from typing import Iterable

from .models import LineItem, Service, ServiceCategory

MIN_ISOLATED_ITEMS = 2


@dataclass
class BundleOutcome:
    lines: list[LineItem]
    bundled: bool = False
    trace: list[tuple] = field(default_factory=list)


def bundle_isolated_items(lines: list[LineItem], services: Iterable[Service]) -> BundleOutcome:
    """
    Replace all isolated vehicle item lines with a single bundled line.

    `services` is the country's full table; differential rows are usually
    inactive, so they are not filtered by the active flag here.
    """
    isolated = [line for line in lines if line.service.categoria == ServiceCategory.ISOLATED_VEHICLE_ITEMS]
    if len(isolated) < MIN_ISOLATED_ITEMS:
        return BundleOutcome(lines=list(lines))

    max_price = max(line.base_price for line in isolated)

    diferencial_id = next((line.service.diferencial_id for line in isolated if line.service.diferencial_id), None)
    diferencial = None
    if diferencial_id:
        diferencial = next((s for s in services if s.servicio_id == diferencial_id), None)

    if diferencial is None:
        return BundleOutcome(
            lines=list(lines),
            trace=[("Bundle", "No differential service found, items kept separate", diferencial_id)],
        )

    combined_price = max_price + diferencial.precio_base
    combined_name = ' + '.join(line.service.subservicio for line in isolated)
    bundle = isolated[0].renamed(subservicio=combined_name, quantity=1, base_price=combined_price)

    others = [line for line in lines if line.service.categoria != ServiceCategory.ISOLATED_VEHICLE_ITEMS]
    return BundleOutcome(
        lines=others + [bundle],
        bundled=True,
        trace=[(
            "Bundle",
            f"{len(isolated)} isolated items: max {max_price:g} + {diferencial.servicio_id} {diferencial.precio_base:g}",
            f"{combined_price:g}",
        )],
    )
