"""
Quote Service - application layer between callers and the pricing engine.

Holds the current table snapshot, validates requests, guards against
overlapping calculations and turns engine error codes into user messages.
"""
import logging
import math
from dataclasses import dataclass
from typing import Optional

from ..config.countries import get_country
from ..config.settings import get_settings, Settings
from ..data.catalog_loader import TableSnapshot, load_tables
from ..engine.formatting import format_range
from ..engine.models import QuoteError, QuoteInput, QuoteResult, Service, Zone
from ..engine.pricing_engine import PricingEngine

logger = logging.getLogger(__name__)

EMPTY_REQUEST = 'EMPTY_REQUEST'

ERROR_MESSAGES = {
    QuoteError.ZONE_NOT_FOUND: 'La zona especificada ("{location}") no fue encontrada en nuestra base de datos.',
    QuoteError.ZONE_INACTIVE: 'La zona especificada no se encuentra activa para cotizaciones en este momento.',
    QuoteError.SERVICE_NOT_FOUND: 'El servicio seleccionado no es válido o está inactivo.',
    EMPTY_REQUEST: 'Agregue al menos un servicio para calcular la cotización.',
}
MISSING_LOCATION_MESSAGE = 'Por favor, complete el código postal (o provincia y ciudad).'


class InvalidQuoteInput(ValueError):
    """The request cannot be priced as submitted."""


class QuoteInProgressError(RuntimeError):
    """A calculation is already running."""


class TableLoadError(RuntimeError):
    """Tables could not be loaded and no previous snapshot exists."""

    def __init__(self, report: dict):
        self.report = report
        super().__init__("; ".join(report.get("errors", [])) or "Table load failed")


@dataclass
class QuoteResponse:
    """Outcome of a quote request, ready for presentation."""
    ok: bool
    result: Optional[QuoteResult] = None
    error_code: Optional[str] = None
    message: Optional[str] = None
    range_label: Optional[str] = None


def error_message(code: str, quote_input: QuoteInput) -> str:
    if code == QuoteError.ZONE_NOT_FOUND:
        if quote_input.cp:
            location = quote_input.cp
        elif quote_input.provincia or quote_input.ciudad:
            location = f"{quote_input.provincia}, {quote_input.ciudad}"
        else:
            return MISSING_LOCATION_MESSAGE
        return ERROR_MESSAGES[code].format(location=location)
    return ERROR_MESSAGES[code]


class QuoteService:
    """Service for computing quotes against the current table snapshot."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        snapshot: Optional[TableSnapshot] = None,
        engine: Optional[PricingEngine] = None,
    ):
        self.settings = settings or get_settings()
        self.engine = engine or PricingEngine()
        self.snapshot: Optional[TableSnapshot] = snapshot
        self.last_report: dict = {}
        self._in_flight = False

        if self.snapshot is None:
            self.reload()

    def reload(self) -> dict:
        """
        Reload all tables and swap the snapshot wholesale.

        A failed reload keeps the previous snapshot; with no previous
        snapshot it raises TableLoadError.
        """
        snapshot, report = load_tables(self.settings)
        self.last_report = report

        if report["status"] != "success":
            if self.snapshot is None:
                raise TableLoadError(report)
            logger.warning("reload failed, keeping previous tables: %s", report["errors"])
            return report

        self.snapshot = snapshot
        return report

    def validate(self, quote_input: QuoteInput) -> None:
        if get_country(quote_input.pais, self.engine.countries) is None:
            raise InvalidQuoteInput(f"País no soportado: {quote_input.pais}")
        for item in quote_input.items:
            if item.quantity is None or not math.isfinite(item.quantity) or item.quantity <= 0:
                raise InvalidQuoteInput(f"La cantidad de {item.service_id} debe ser mayor a 0.")

    def quote(self, quote_input: QuoteInput) -> QuoteResponse:
        """
        Compute a quote.

        Raises:
            InvalidQuoteInput: unknown country or non-positive quantity
            QuoteInProgressError: another calculation is running
        """
        if self._in_flight:
            raise QuoteInProgressError("Ya hay una cotización en curso.")

        self.validate(quote_input)
        self._in_flight = True
        try:
            snapshot = self.snapshot
            outcome = self.engine.calculate(
                quote_input,
                snapshot.services,
                snapshot.zones,
                snapshot.postal_codes,
                snapshot.discount_rules,
            )
        finally:
            self._in_flight = False

        if outcome is None:
            return QuoteResponse(ok=False, error_code=EMPTY_REQUEST,
                                 message=error_message(EMPTY_REQUEST, quote_input))
        if not outcome.ok:
            return QuoteResponse(ok=False, error_code=outcome.error.value,
                                 message=error_message(outcome.error, quote_input))

        result = outcome.result
        country = get_country(quote_input.pais, self.engine.countries)
        return QuoteResponse(
            ok=True,
            result=result,
            range_label=format_range(result.min, result.max, country),
        )

    def services_for(self, pais: str, include_inactive: bool = False) -> list[Service]:
        """Services offered in a country (sellable ones by default)."""
        pais = str(pais).upper()
        return [
            s for s in self.snapshot.services
            if s.pais == pais and (include_inactive or s.active)
        ]

    def zones_for(self, pais: str) -> list[Zone]:
        pais = str(pais).upper()
        return [z for z in self.snapshot.zones if z.pais == pais]
