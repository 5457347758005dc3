"""
Rule Matcher - selects the single discount applied to a quote.

Stages are evaluated in precedence order and the first one that fires
wins; later stages are skipped:
1. Dynamic category rules (cash/transfer payments only)
2. Zone general discount
"""
import logging
import unicodedata
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .models import (
    AppliedDiscount,
    DiscountRule,
    LineItem,
    PaymentMethod,
    ServiceCategory,
    Zone,
)

logger = logging.getLogger(__name__)

GENERAL_CATEGORY = 'general'

# Categories never covered by "general" rules nor by zone discounts
EXCLUDED_FROM_GENERAL = (ServiceCategory.VEHICLE_AESTHETICS,)


def normalize(text: str) -> str:
    """Strip accents and lowercase ('Bebé' → 'bebe')."""
    decomposed = unicodedata.normalize('NFD', str(text or ''))
    return ''.join(c for c in decomposed if not unicodedata.combining(c)).lower()


def format_pct(pct: float) -> str:
    """Fraction to a percent label without trailing zeros (0.15 → '15')."""
    return f"{round(pct * 100, 6):.6f}".rstrip('0').rstrip('.')


@dataclass
class DiscountSelection:
    """Discount decision for a quote."""
    price_after_discount: float
    applied: Optional[AppliedDiscount] = None
    trace: list[tuple] = field(default_factory=list)


@dataclass
class MatchedRule:
    """A dynamic rule whose quantity threshold is met."""
    rule: DiscountRule
    lines: list[LineItem]
    quantity: float
    match_reason: str


class RuleMatcher:
    """
    Matches dynamic discount rules against priced lines and applies the
    best qualifying one, falling back to the zone discount.
    """

    def __init__(self, rules: Iterable[DiscountRule] = ()):
        self.rules = list(rules)

    def active_rules(self, pais: str) -> list[DiscountRule]:
        """
        Active rules for a country (or 'ALL'), best discount first.

        Ties keep their table order (stable sort).
        """
        rules = [r for r in self.rules if r.active and r.pais in (pais, 'ALL')]
        return sorted(rules, key=lambda r: r.discount_pct, reverse=True)

    @staticmethod
    def lines_for_category(category: str, lines: list[LineItem]) -> list[LineItem]:
        target = normalize(category)
        if target == GENERAL_CATEGORY:
            return [line for line in lines if line.service.categoria not in EXCLUDED_FROM_GENERAL]
        return [line for line in lines if normalize(line.service.categoria.value) == target]

    def find_matching_rule(self, pais: str, lines: list[LineItem]) -> Optional[MatchedRule]:
        """First rule (best discount first) whose summed quantity reaches min_qty."""
        for rule in self.active_rules(pais):
            matched = self.lines_for_category(rule.category, lines)
            quantity = sum(line.quantity for line in matched)
            if quantity >= rule.min_qty:
                return MatchedRule(
                    rule=rule,
                    lines=matched,
                    quantity=quantity,
                    match_reason=f"category={rule.category}, qty {quantity:g}>={rule.min_qty}",
                )
        return None

    def _dynamic_stage(self, pais, payment_method, zone, lines, subtotal, selection) -> bool:
        if payment_method != PaymentMethod.CASH_TRANSFER:
            selection.trace.append(("Promotions", "Skipped: payment method is not cash/transfer", None))
            return False

        match = self.find_matching_rule(pais, lines)
        if match is None:
            selection.trace.append(("Promotions", "No dynamic rule threshold met", None))
            return False

        rule = match.rule
        amount = sum(line.base_price for line in match.lines) * rule.discount_pct
        description = rule.description or f"{format_pct(rule.discount_pct)}% OFF en {rule.category}"
        selection.price_after_discount = subtotal - amount
        selection.applied = AppliedDiscount(type='PROMO', description=description, amount=amount, pct=rule.discount_pct)
        selection.trace.append(("Promotions", f"{description} ({match.match_reason})", f"-{amount:g}"))
        return True

    def _zone_stage(self, pais, payment_method, zone, lines, subtotal, selection) -> bool:
        if zone.general_discount_pct <= 0:
            selection.trace.append(("Zone Discount", f"Zone {zone.zone_id} has no general discount", None))
            return False

        eligible = sum(line.base_price for line in lines if line.service.categoria not in EXCLUDED_FROM_GENERAL)
        ineligible = subtotal - eligible
        pct = zone.general_discount_pct
        amount = eligible * pct
        selection.price_after_discount = (eligible - amount) + ineligible
        selection.applied = AppliedDiscount(
            type='ZONE_GENERAL',
            description=f"{format_pct(pct)}% Descuento General Zona",
            amount=amount,
            pct=pct,
        )
        selection.trace.append(("Zone Discount", f"{format_pct(pct)}% on eligible {eligible:g}", f"-{amount:g}"))
        return True

    def select_discount(
        self,
        pais: str,
        payment_method: PaymentMethod,
        zone: Zone,
        lines: list[LineItem],
        subtotal: float,
    ) -> DiscountSelection:
        """Apply at most one discount to `subtotal`."""
        selection = DiscountSelection(price_after_discount=subtotal)
        for stage in (self._dynamic_stage, self._zone_stage):
            if stage(pais, payment_method, zone, lines, subtotal, selection):
                logger.debug("discount %s applied", selection.applied.type, extra={'pais': pais})
                break
        return selection
