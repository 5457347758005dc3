from dataclasses import asdict
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..engine.models import Service, Zone
from ..services.quote_service import (
    EMPTY_REQUEST,
    InvalidQuoteInput,
    QuoteInProgressError,
    QuoteService,
)
from .schemas import QuoteErrorResponse, QuoteRequest, ServiceResponse, ZoneResponse
from .state import get_quote_service

app = FastAPI(
    title="Cotizador API",
    description="Quote pricing engine for cleaning services (AR / BO)",
    version=__version__,
)

# Enable CORS for the form frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _service_response(service: Service) -> ServiceResponse:
    data = asdict(service)
    data['categoria'] = service.categoria.value
    data['unidad'] = service.unidad.value
    return ServiceResponse(**data)


def _zone_response(zone: Zone) -> ZoneResponse:
    return ZoneResponse(**asdict(zone))


def _error(status_code: int, code: str, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail=QuoteErrorResponse(code=code, message=message).model_dump())


@app.get("/")
async def root():
    return {"status": "online", "message": "Cotizador API Active"}


@app.post("/quotes")
async def create_quote(req: QuoteRequest, service: QuoteService = Depends(get_quote_service)):
    try:
        response = service.quote(req.to_input())
    except InvalidQuoteInput as e:
        raise _error(400, "INVALID_INPUT", str(e))
    except QuoteInProgressError as e:
        raise _error(409, "IN_PROGRESS", str(e))

    if not response.ok:
        status = 400 if response.error_code == EMPTY_REQUEST else 422
        raise _error(status, response.error_code, response.message)

    payload = response.result.to_dict()
    payload["rangeLabel"] = response.range_label
    return payload


@app.get("/services", response_model=list[ServiceResponse])
async def list_services(pais: str, include_inactive: bool = False,
                        service: QuoteService = Depends(get_quote_service)):
    return [_service_response(s) for s in service.services_for(pais, include_inactive=include_inactive)]


@app.get("/zones", response_model=list[ZoneResponse])
async def list_zones(pais: str, service: QuoteService = Depends(get_quote_service)):
    return [_zone_response(z) for z in service.zones_for(pais)]


@app.get("/system/status")
async def get_status(service: QuoteService = Depends(get_quote_service)):
    report: Optional[dict] = service.last_report or None
    return {
        "engine_active": True,
        "tables": service.snapshot.counts(),
        "last_load": {
            "status": report.get("status"),
            "timestamp": report.get("timestamp"),
            "warnings": report.get("warnings", []),
            "errors": report.get("errors", []),
        } if report else None,
    }


@app.post("/system/reload")
async def reload_tables(service: QuoteService = Depends(get_quote_service)):
    report = service.reload()
    return {
        "success": report["status"] == "success",
        "tables": service.snapshot.counts(),
        "warnings": report.get("warnings", []),
        "errors": report.get("errors", []),
    }
