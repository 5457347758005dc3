"""
Data models for the quote engine.

Uses dataclasses for structured, type-safe data representation. Table
records (Service, Zone, PostalCode, DiscountRule) keep the column names of
the source sheets; engine outputs use English names.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional


class ServiceCategory(str, Enum):
    VEHICLES = 'Vehículos'
    ISOLATED_VEHICLE_ITEMS = 'Vehículos Aislados'
    VEHICLE_AESTHETICS = 'Estética Vehicular'
    MATTRESSES = 'Colchones'
    UPHOLSTERY = 'Tapizados'
    CHAIRS = 'Sillas'
    CARPETS = 'Alfombras'
    BABY = 'Bebé'
    CURTAINS = 'Cortinas'
    OTHER = 'Otros'


class ServiceUnit(str, Enum):
    PIECE = 'pieza'
    SQUARE_METER = 'm2'
    UNIT = 'unidad'  # vehicle plans


class PaymentMethod(str, Enum):
    CASH_TRANSFER = 'cash_transfer'
    OTHER = 'other'


class QuoteError(str, Enum):
    """Terminal failure kinds of a quote calculation."""
    ZONE_NOT_FOUND = 'ZONE_NOT_FOUND'
    ZONE_INACTIVE = 'ZONE_INACTIVE'
    SERVICE_NOT_FOUND = 'SERVICE_NOT_FOUND'


@dataclass(frozen=True)
class Service:
    """A sellable unit from the Servicios (or Extras) sheet."""
    servicio_id: str
    pais: str
    moneda: str
    servicio: str
    subservicio: str
    categoria: ServiceCategory
    unidad: ServiceUnit
    precio_base: float
    diferencial_id: Optional[str] = None  # links isolated items to a surcharge service
    notas: Optional[str] = None
    active: bool = True
    # m2-based services only
    tasa_m2: Optional[float] = None
    min_cargo: Optional[float] = None


@dataclass(frozen=True)
class Zone:
    """A geographic pricing region."""
    zone_id: str
    pais: str
    provincia: str
    ciudad: str
    general_discount_pct: float = 0.0
    active: bool = True
    operary_name: Optional[str] = None


@dataclass(frozen=True)
class PostalCode:
    """Maps an inclusive postal-code range to a zone."""
    pais: str
    cp_from: str
    cp_to: str
    zone_id: str


@dataclass(frozen=True)
class DiscountRule:
    """A dynamic category + quantity threshold promotion."""
    pais: str  # country code or 'ALL'
    category: str  # category label or 'general'
    min_qty: int
    discount_pct: float
    active: bool = True
    description: Optional[str] = None


@dataclass
class QuoteItem:
    """A requested service; key only identifies the row in a form."""
    service_id: str
    quantity: float
    key: Optional[int] = None


@dataclass
class QuoteInput:
    """A quote request."""
    pais: str
    items: list[QuoteItem]
    cp: str = ""
    provincia: str = ""
    ciudad: str = ""
    payment_method: PaymentMethod = PaymentMethod.OTHER


@dataclass
class TraceStep:
    """A single step in the quote resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass(frozen=True)
class LineItem:
    """A priced line before any global discount."""
    service: Service
    quantity: float
    base_price: float

    def renamed(self, subservicio: str, quantity: float, base_price: float) -> 'LineItem':
        """Copy of this line with the service relabelled."""
        return LineItem(
            service=replace(self.service, subservicio=subservicio),
            quantity=quantity,
            base_price=base_price,
        )


@dataclass(frozen=True)
class AppliedDiscount:
    type: str  # "PROMO" or "ZONE_GENERAL"
    description: str
    amount: float
    pct: float


@dataclass
class QuoteDetail:
    """Full breakdown of a computed quote."""
    workload_subtotal: float
    applied_discount: Optional[AppliedDiscount]
    price_after_discount: float
    minimum_charge_applied: float
    final_price: float
    zone_id: str
    moneda: str
    items: list[LineItem]
    operary_name: Optional[str] = None
    trace: list[TraceStep] = field(default_factory=list)

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)


@dataclass
class QuoteResult:
    """Complete result of a quote calculation."""
    min: float
    max: float
    detail: QuoteDetail
    notes: list[str] = field(default_factory=list)
    summary: str = ""

    def to_dict(self) -> dict:
        """Convert to the camelCase wire format consumed by the presentation layer."""
        detail = self.detail
        discount = detail.applied_discount
        return {
            "min": self.min,
            "max": self.max,
            "detail": {
                "workloadSubtotal": detail.workload_subtotal,
                "appliedDiscount": {
                    "type": discount.type,
                    "description": discount.description,
                    "amount": discount.amount,
                    "pct": discount.pct,
                } if discount else None,
                "priceAfterDiscount": detail.price_after_discount,
                "minimumChargeApplied": detail.minimum_charge_applied,
                "finalPrice": detail.final_price,
                "zoneId": detail.zone_id,
                "moneda": detail.moneda,
                "operaryName": detail.operary_name,
                "items": [
                    {
                        "serviceId": line.service.servicio_id,
                        "servicio": line.service.servicio,
                        "subservicio": line.service.subservicio,
                        "categoria": line.service.categoria.value,
                        "quantity": line.quantity,
                        "basePrice": line.base_price,
                    }
                    for line in detail.items
                ],
            },
            "notes": list(self.notes),
            "summary": self.summary,
        }


@dataclass(frozen=True)
class QuoteOutcome:
    """Either a QuoteResult or the QuoteError that stopped the calculation."""
    result: Optional[QuoteResult] = None
    error: Optional[QuoteError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, result: QuoteResult) -> 'QuoteOutcome':
        return cls(result=result)

    @classmethod
    def failure(cls, error: QuoteError) -> 'QuoteOutcome':
        return cls(error=error)
