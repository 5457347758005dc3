"""Engine subpackage - core quote pricing logic."""
from .pricing_engine import PricingEngine, calculate_quote
from .models import (
    DiscountRule,
    PaymentMethod,
    PostalCode,
    QuoteError,
    QuoteInput,
    QuoteItem,
    QuoteOutcome,
    QuoteResult,
    Service,
    ServiceCategory,
    ServiceUnit,
    Zone,
)

__all__ = [
    'PricingEngine', 'calculate_quote',
    'DiscountRule', 'PaymentMethod', 'PostalCode', 'QuoteError', 'QuoteInput',
    'QuoteItem', 'QuoteOutcome', 'QuoteResult', 'Service', 'ServiceCategory',
    'ServiceUnit', 'Zone',
]
