"""
Pydantic request/response models for the quote API.
"""
from typing import Optional

from pydantic import BaseModel, Field

from ..engine.models import PaymentMethod, QuoteInput, QuoteItem


class QuoteItemRequest(BaseModel):
    """Request model for one requested service."""
    serviceId: str
    quantity: float = Field(1, allow_inf_nan=False)
    key: Optional[int] = None


class QuoteRequest(BaseModel):
    """Request model mirroring the engine's QuoteInput."""
    pais: str
    cp: str = ""
    provincia: str = ""
    ciudad: str = ""
    items: list[QuoteItemRequest] = Field(default_factory=list)
    paymentMethod: PaymentMethod = PaymentMethod.OTHER

    def to_input(self) -> QuoteInput:
        return QuoteInput(
            pais=self.pais.strip().upper(),
            cp=self.cp.strip(),
            provincia=self.provincia.strip(),
            ciudad=self.ciudad.strip(),
            items=[QuoteItem(service_id=i.serviceId, quantity=i.quantity, key=i.key) for i in self.items],
            payment_method=self.paymentMethod,
        )


class ServiceResponse(BaseModel):
    """Response model for a service."""
    servicio_id: str
    pais: str
    moneda: str
    servicio: str
    subservicio: str
    categoria: str
    unidad: str
    precio_base: float
    diferencial_id: Optional[str]
    notas: Optional[str]
    active: bool
    tasa_m2: Optional[float]
    min_cargo: Optional[float]


class ZoneResponse(BaseModel):
    """Response model for a zone."""
    zone_id: str
    pais: str
    provincia: str
    ciudad: str
    general_discount_pct: float
    active: bool
    operary_name: Optional[str]


class QuoteErrorResponse(BaseModel):
    code: str
    message: str
