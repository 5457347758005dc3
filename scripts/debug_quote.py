"""
Print the full resolution trace of a quote.

Usage:
    python scripts/debug_quote.py AR 1414 veh_std_basico_ar:1 silla_comedor_ar:6
    python scripts/debug_quote.py BO - bebe_coche_bo:2
"""
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from cotizador.data.catalog_loader import load_tables
from cotizador.engine import PricingEngine
from cotizador.engine.models import PaymentMethod, QuoteInput, QuoteItem


def parse_items(args):
    items = []
    for key, arg in enumerate(args):
        service_id, _, qty = arg.partition(':')
        items.append(QuoteItem(service_id=service_id, quantity=float(qty or 1), key=key))
    return items


def debug(argv):
    if len(argv) < 3:
        print(__doc__)
        sys.exit(1)

    pais, cp, *item_args = argv
    snapshot, report = load_tables()
    if report["status"] != "success":
        print("Tables failed to load:")
        for error in report["errors"]:
            print(f"  {error}")
        sys.exit(1)

    print("Loaded tables:", snapshot.counts())

    req = QuoteInput(
        pais=pais.upper(),
        cp='' if cp == '-' else cp,
        items=parse_items(item_args),
        payment_method=PaymentMethod.CASH_TRANSFER,
    )
    outcome = PricingEngine().calculate(
        req, snapshot.services, snapshot.zones, snapshot.postal_codes, snapshot.discount_rules
    )

    if outcome is None:
        print("No items requested.")
        return
    if not outcome.ok:
        print(f"Quote failed: {outcome.error.value}")
        return

    result = outcome.result
    print("\n--- Trace ---")
    print(result.detail.get_trace_text())
    print("\n--- Notes ---")
    for note in result.notes:
        print(f"  - {note}")
    print(f"\n{result.summary}")


if __name__ == "__main__":
    debug(sys.argv[1:])
