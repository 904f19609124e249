"""
Front office builders shared by the engine test modules.

Builders are exposed as factory fixtures:

    def test_x(make_contact):
        contact = make_contact(email="ana@example.com")
"""

from decimal import Decimal

import pytest

from core.primitives.money import Money
from core.primitives.party import Address, ContactInformation
from engines.front_office.quote import QuoteLineItem
from engines.front_office.value_objects import VehicleIdentification

VIN = "9BWZZZ377VT004251"
OTHER_VIN = "1HGCM82633A004352"


def _contact(email="maria@example.com", full_name="Maria Silva"):
    return ContactInformation(
        full_name=full_name,
        email=email,
        phone_number="+55 11 91234-5678",
        address=Address(
            street="Rua Augusta, 1500",
            city="São Paulo",
            state="SP",
            postal_code="01304-001",
        ),
    )


def _identification(vin=VIN, plate="ABC1D23", **overrides):
    data = dict(
        vin=vin,
        license_plate=plate,
        make="Volkswagen",
        model="Gol",
        year=2019,
        color="Prata",
    )
    data.update(overrides)
    return VehicleIdentification(**data)


def _line_item(description="Pastilha de freio", quantity=1, price="120.00",
               currency="BRL", part_number=None):
    return QuoteLineItem(
        description=description,
        quantity=quantity,
        unit_price=Money(Decimal(price), currency),
        part_number=part_number,
    )


@pytest.fixture
def make_contact():
    return _contact


@pytest.fixture
def make_identification():
    return _identification


@pytest.fixture
def make_line_item():
    return _line_item


@pytest.fixture
def other_vin():
    return OTHER_VIN
