import os
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from cotizador.config.settings import Settings
from cotizador.data.catalog_loader import TableSnapshot, load_tables
from cotizador.engine import PricingEngine
from cotizador.engine.models import (
    DiscountRule,
    PaymentMethod,
    PostalCode,
    QuoteInput,
    QuoteItem,
    Service,
    ServiceCategory,
    ServiceUnit,
    Zone,
)


def make_service(servicio_id, categoria=ServiceCategory.OTHER, precio_base=1000.0, pais='AR', **kwargs):
    defaults = dict(
        moneda='ARS' if pais == 'AR' else 'Bs',
        servicio=servicio_id,
        subservicio=servicio_id,
        unidad=ServiceUnit.UNIT,
    )
    defaults.update(kwargs)
    return Service(servicio_id=servicio_id, pais=pais, categoria=categoria, precio_base=precio_base, **defaults)


def make_input(*items, pais='AR', cp='', provincia='', ciudad='', payment=PaymentMethod.CASH_TRANSFER):
    """items: (service_id, quantity) pairs."""
    return QuoteInput(
        pais=pais,
        cp=cp,
        provincia=provincia,
        ciudad=ciudad,
        items=[QuoteItem(service_id=sid, quantity=qty, key=i) for i, (sid, qty) in enumerate(items)],
        payment_method=payment,
    )


@pytest.fixture
def services():
    return [
        make_service('veh_std_basico_ar', ServiceCategory.VEHICLES, 37999, subservicio='Plan Básico'),
        make_service('aislado_butaca_delantera_ar', ServiceCategory.ISOLATED_VEHICLE_ITEMS, 34000,
                     subservicio='Butacas delanteras', diferencial_id='dif_std_ar'),
        make_service('aislado_asiento_trasero_ar', ServiceCategory.ISOLATED_VEHICLE_ITEMS, 32000,
                     subservicio='Asiento trasero', diferencial_id='dif_std_ar'),
        make_service('aislado_piso_std_suv_ar', ServiceCategory.ISOLATED_VEHICLE_ITEMS, 26000,
                     subservicio='Piso (Auto/SUV)', diferencial_id='dif_std_ar'),
        make_service('aislado_sin_dif_ar', ServiceCategory.ISOLATED_VEHICLE_ITEMS, 20000,
                     subservicio='Consola'),
        make_service('dif_std_ar', ServiceCategory.OTHER, 9000, subservicio='Estándar/SUV', active=False),
        make_service('sillon_3c_ar', ServiceCategory.UPHOLSTERY, 54999, unidad=ServiceUnit.PIECE,
                     subservicio='3 cuerpos'),
        make_service('silla_ar', ServiceCategory.CHAIRS, 8000, unidad=ServiceUnit.PIECE, subservicio='Silla'),
        make_service('bebe_coche_ar', ServiceCategory.BABY, 30000, unidad=ServiceUnit.PIECE,
                     subservicio='Coche de bebé'),
        make_service('estetica_opticas_ar', ServiceCategory.VEHICLE_AESTHETICS, 40000,
                     subservicio='Pulido de ópticas'),
        make_service('alfombra_corto_ar', ServiceCategory.CARPETS, 0, unidad=ServiceUnit.SQUARE_METER,
                     subservicio='Pelo Corto', tasa_m2=8000, min_cargo=30000),
        make_service('colchon_viejo_ar', ServiceCategory.MATTRESSES, 31999, active=False),
        make_service('sillon_1c_bo', ServiceCategory.UPHOLSTERY, 156, pais='BO', subservicio='1 cuerpo'),
        make_service('bebe_coche_bo', ServiceCategory.BABY, 146, pais='BO', subservicio='Coche de bebé'),
        make_service('veh_std_tutto_bo', ServiceCategory.VEHICLES, 372, pais='BO', subservicio='Plan Tutto'),
    ]


@pytest.fixture
def zones():
    return [
        Zone('CABA', 'AR', 'Buenos Aires', 'CABA'),
        Zone('LA_PLATA', 'AR', 'Buenos Aires', 'La Plata', general_discount_pct=0.10),
        Zone('MAR_DEL_PLATA', 'AR', 'Buenos Aires', 'Mar del Plata', general_discount_pct=0.10,
             operary_name='Operario MDP'),
        Zone('TANDIL', 'AR', 'Buenos Aires', 'Tandil', active=False),
        Zone('LA_PAZ_BO', 'BO', 'La Paz', 'La Paz (Bolivia)', general_discount_pct=0.10),
    ]


@pytest.fixture
def postal_codes():
    return [
        PostalCode('AR', '1000', '1499', 'CABA'),
        PostalCode('AR', '1900', '1999', 'LA_PLATA'),
        PostalCode('AR', '7600', '7699', 'MAR_DEL_PLATA'),
        PostalCode('AR', '7000', '7099', 'TANDIL'),
        PostalCode('AR', '8000', '8099', 'ZONA_BORRADA'),
        PostalCode('BO', '2000', '2999', 'LA_PAZ_BO'),
    ]


@pytest.fixture
def discount_rules():
    return [
        DiscountRule('AR', 'Sillas', min_qty=6, discount_pct=0.15),
        DiscountRule('ALL', 'Bebe', min_qty=2, discount_pct=0.20, description='Promo bebé'),
    ]


@pytest.fixture
def engine():
    return PricingEngine()


@pytest.fixture
def tables(services, zones, postal_codes, discount_rules):
    return services, zones, postal_codes, discount_rules


@pytest.fixture(scope="session")
def seed_settings():
    return Settings.load()


@pytest.fixture(scope="session")
def seed_snapshot(seed_settings) -> TableSnapshot:
    snapshot, report = load_tables(seed_settings)
    assert report["status"] == "success", report["errors"]
    return snapshot
