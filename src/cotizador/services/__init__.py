"""Services subpackage - application layer around the engine."""
from .quote_service import (
    InvalidQuoteInput,
    QuoteInProgressError,
    QuoteResponse,
    QuoteService,
    TableLoadError,
)

__all__ = ['InvalidQuoteInput', 'QuoteInProgressError', 'QuoteResponse', 'QuoteService', 'TableLoadError']
