"""
Line pricing and isolated-item bundling.
"""
import pytest

from conftest import make_service
from cotizador.engine.bundling import bundle_isolated_items
from cotizador.engine.line_pricer import line_base_price, price_lines
from cotizador.engine.models import LineItem, QuoteItem, ServiceCategory, ServiceUnit


def by_id(services, servicio_id):
    return next(s for s in services if s.servicio_id == servicio_id)


def priced_line(services, servicio_id, quantity=1):
    service = by_id(services, servicio_id)
    return LineItem(service=service, quantity=quantity, base_price=line_base_price(service, quantity))


# =============================================================================
# Line pricing
# =============================================================================

def test_piece_price_multiplies_quantity(services):
    assert line_base_price(by_id(services, 'silla_ar'), 6) == 48000


@pytest.mark.parametrize("m2,expected", [
    (2, 30000),    # 16000 below the minimum charge
    (3.75, 30000),
    (5, 40000),
])
def test_square_meter_price_respects_minimum(services, m2, expected):
    assert line_base_price(by_id(services, 'alfombra_corto_ar'), m2) == expected


def test_square_meter_without_minimum():
    service = make_service('alfombra_x', ServiceCategory.CARPETS, 0, unidad=ServiceUnit.SQUARE_METER, tasa_m2=9000)
    assert line_base_price(service, 2) == 18000


def test_price_lines_keeps_input_order(services):
    items = [QuoteItem('sillon_3c_ar', 1), QuoteItem('veh_std_basico_ar', 1), QuoteItem('silla_ar', 2)]
    priced = price_lines(items, services)
    assert priced.missing_service_id is None
    assert [line.service.servicio_id for line in priced.lines] == ['sillon_3c_ar', 'veh_std_basico_ar', 'silla_ar']
    assert [line.base_price for line in priced.lines] == [54999, 37999, 16000]


def test_price_lines_stops_at_unknown_service(services):
    items = [QuoteItem('silla_ar', 1), QuoteItem('no_existe', 1), QuoteItem('sillon_3c_ar', 1)]
    priced = price_lines(items, services)
    assert priced.missing_service_id == 'no_existe'
    assert len(priced.lines) == 1


def test_duplicate_service_id_uses_first_row():
    services = [make_service('dup', precio_base=100), make_service('dup', precio_base=999)]
    priced = price_lines([QuoteItem('dup', 1)], services)
    assert priced.lines[0].base_price == 100


# =============================================================================
# Bundling
# =============================================================================

@pytest.mark.parametrize("quantity", [1, 2])
def test_single_isolated_item_is_not_bundled(services, quantity):
    lines = [priced_line(services, 'aislado_butaca_delantera_ar', quantity)]
    outcome = bundle_isolated_items(lines, services)
    assert not outcome.bundled
    assert outcome.lines == lines
    assert outcome.lines[0].base_price == quantity * 34000


def test_two_isolated_items_bundle_with_differential(services):
    """Most expensive item plus the vehicle-class surcharge."""
    lines = [priced_line(services, 'aislado_butaca_delantera_ar'), priced_line(services, 'aislado_piso_std_suv_ar')]
    outcome = bundle_isolated_items(lines, services)

    assert outcome.bundled
    assert len(outcome.lines) == 1
    bundle = outcome.lines[0]
    assert bundle.base_price == 34000 + 9000
    assert bundle.quantity == 1
    assert bundle.service.servicio_id == 'aislado_butaca_delantera_ar'
    assert bundle.service.subservicio == 'Butacas delanteras + Piso (Auto/SUV)'


def test_bundle_is_appended_after_other_lines(services):
    lines = [
        priced_line(services, 'aislado_piso_std_suv_ar'),
        priced_line(services, 'sillon_3c_ar'),
        priced_line(services, 'aislado_asiento_trasero_ar'),
        priced_line(services, 'silla_ar', 2),
    ]
    outcome = bundle_isolated_items(lines, services)
    assert [line.service.servicio_id for line in outcome.lines] == ['sillon_3c_ar', 'silla_ar', 'aislado_piso_std_suv_ar']
    assert outcome.lines[-1].base_price == 32000 + 9000


def test_differential_taken_from_first_item_that_has_one(services):
    lines = [priced_line(services, 'aislado_sin_dif_ar'), priced_line(services, 'aislado_butaca_delantera_ar')]
    outcome = bundle_isolated_items(lines, services)
    assert outcome.bundled
    assert outcome.lines[0].base_price == 43000
    assert outcome.lines[0].service.subservicio == 'Consola + Butacas delanteras'


def test_inactive_differential_is_still_used(services):
    assert not by_id(services, 'dif_std_ar').active
    lines = [priced_line(services, 'aislado_butaca_delantera_ar'), priced_line(services, 'aislado_asiento_trasero_ar')]
    assert bundle_isolated_items(lines, services).bundled


def test_no_differential_leaves_items_separate(services):
    lines = [priced_line(services, 'aislado_sin_dif_ar'), priced_line(services, 'aislado_sin_dif_ar')]
    outcome = bundle_isolated_items(lines, services)
    assert not outcome.bundled
    assert outcome.lines == lines
    assert outcome.trace


def test_missing_differential_row_leaves_items_separate(services):
    catalog = [s for s in services if s.servicio_id != 'dif_std_ar']
    lines = [priced_line(services, 'aislado_butaca_delantera_ar'), priced_line(services, 'aislado_piso_std_suv_ar')]
    outcome = bundle_isolated_items(lines, catalog)
    assert not outcome.bundled
    assert sum(line.base_price for line in outcome.lines) == 60000
