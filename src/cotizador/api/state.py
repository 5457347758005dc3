"""
Shared application state for the API: one QuoteService per process.
"""
from typing import Optional

from ..config.logging_conf import configure_logging
from ..services.quote_service import QuoteService

_service: Optional[QuoteService] = None


def get_quote_service() -> QuoteService:
    """Get the process-wide quote service, loading tables on first use."""
    global _service
    if _service is None:
        configure_logging()
        _service = QuoteService()
    return _service
