"""
Front Office Engine — Vehicle Aggregate Tests
=============================================
Odometer rules, service history, ownership transfer and the
service-due heuristic.
"""

import sys
from datetime import datetime, timedelta, timezone

import pytest

from core.primitives.errors import ValidationError
from core.primitives.identity import new_entity_id
from engines.front_office.errors import (
    InactiveVehicle,
    MileageRegression,
    NegativeMileage,
)
from engines.front_office.vehicle import (
    REACTIVATION_RECORD,
    TRANSFER_RECORD,
    Vehicle,
)


@pytest.fixture
def vehicle(make_identification):
    return Vehicle(new_entity_id(), make_identification(), mileage=40_000)


class TestVehicleCreation:
    def test_defaults(self, make_identification):
        v = Vehicle(new_entity_id(), make_identification())
        assert v.mileage == 0
        assert v.is_active
        assert v.last_service_date is None
        assert v.last_service_mileage is None
        assert v.service_history == ()

    def test_negative_initial_mileage(self, make_identification):
        with pytest.raises(NegativeMileage):
            Vehicle(new_entity_id(), make_identification(), mileage=-1)

    def test_identification_type_checked(self):
        with pytest.raises(TypeError):
            Vehicle(new_entity_id(), "9BWZZZ377VT004251")

    def test_raises_no_events(self, vehicle):
        assert not vehicle.has_domain_events


class TestVehicleMileage:
    def test_update_mileage(self, vehicle):
        vehicle.update_mileage(41_000)
        assert vehicle.mileage == 41_000

    def test_same_mileage_allowed(self, vehicle):
        vehicle.update_mileage(40_000)
        assert vehicle.mileage == 40_000

    def test_regression_rejected(self, vehicle):
        with pytest.raises(MileageRegression):
            vehicle.update_mileage(39_999)
        assert vehicle.mileage == 40_000

    def test_negative_checked_first(self, vehicle):
        with pytest.raises(NegativeMileage):
            vehicle.update_mileage(-5)

    def test_inactive_vehicle(self, vehicle):
        vehicle.deactivate()
        with pytest.raises(InactiveVehicle):
            vehicle.update_mileage(50_000)


class TestServiceHistory:
    def test_record_format_with_mileage(self, vehicle):
        vehicle.add_service_record(
            "Troca de óleo", datetime(2026, 2, 10, tzinfo=timezone.utc), 45_000,
        )
        assert vehicle.service_history == ("2026-02-10: Troca de óleo (Mileage: 45,000)",)

    def test_record_format_without_mileage(self, vehicle):
        vehicle.add_service_record("Alinhamento", datetime(2026, 2, 10, tzinfo=timezone.utc))
        assert vehicle.service_history == ("2026-02-10: Alinhamento",)
        assert vehicle.last_service_mileage is None

    def test_service_mileage_raises_odometer(self, vehicle):
        vehicle.add_service_record("Revisão", datetime(2026, 2, 10, tzinfo=timezone.utc), 45_000)
        assert vehicle.mileage == 45_000
        assert vehicle.last_service_mileage == 45_000

    def test_lower_service_mileage_keeps_odometer(self, vehicle):
        vehicle.add_service_record("Revisão", datetime(2025, 1, 10, tzinfo=timezone.utc), 30_000)
        assert vehicle.mileage == 40_000
        assert vehicle.last_service_mileage == 30_000

    def test_last_service_date_only_moves_forward(self, vehicle):
        newer = datetime(2026, 2, 10, tzinfo=timezone.utc)
        older = datetime(2025, 6, 1, tzinfo=timezone.utc)
        vehicle.add_service_record("Revisão", newer)
        vehicle.add_service_record("Registro antigo", older)
        assert vehicle.last_service_date == newer
        assert len(vehicle.service_history) == 2

    def test_blank_description(self, vehicle):
        with pytest.raises(ValidationError):
            vehicle.add_service_record("  ", datetime(2026, 2, 10, tzinfo=timezone.utc))

    def test_inactive_vehicle(self, vehicle):
        vehicle.deactivate()
        with pytest.raises(InactiveVehicle):
            vehicle.add_service_record("Revisão", datetime(2026, 2, 10, tzinfo=timezone.utc))


class TestServiceDue:
    def test_never_serviced(self, vehicle):
        assert vehicle.days_since_last_service == sys.maxsize
        assert vehicle.is_due_for_service()

    def test_recent_service_not_due(self, vehicle, clock):
        vehicle.add_service_record("Revisão", clock.now_utc() - timedelta(days=30), 40_000)
        assert vehicle.days_since_last_service == 30
        assert not vehicle.is_due_for_service()

    def test_due_by_days(self, vehicle, clock):
        vehicle.add_service_record("Revisão", clock.now_utc() - timedelta(days=181), 40_000)
        assert vehicle.is_due_for_service()
        assert not vehicle.is_due_for_service(max_days_since_service=365)

    def test_due_by_miles(self, vehicle, clock):
        vehicle.add_service_record("Revisão", clock.now_utc() - timedelta(days=10), 40_000)
        vehicle.update_mileage(45_000)
        assert vehicle.is_due_for_service()
        assert not vehicle.is_due_for_service(max_miles_since_service=10_000)


class TestOwnershipAndActivation:
    def test_transfer(self, vehicle):
        new_owner = new_entity_id()
        vehicle.transfer_to_customer(new_owner)
        assert vehicle.customer_id == new_owner
        assert vehicle.service_history[-1] == f"2026-03-02: {TRANSFER_RECORD}"

    def test_transfer_is_not_a_service_visit(self, vehicle):
        vehicle.transfer_to_customer(new_entity_id())
        assert vehicle.last_service_date is None

    def test_transfer_to_same_owner_is_noop(self, vehicle):
        vehicle.transfer_to_customer(vehicle.customer_id)
        assert vehicle.service_history == ()
        assert vehicle.updated_at is None

    def test_deactivate_with_reason(self, vehicle):
        vehicle.deactivate("Perda total")
        assert not vehicle.is_active
        assert vehicle.service_history[-1] == "2026-03-02: Vehicle deactivated: Perda total"

    def test_deactivate_without_reason_records_nothing(self, vehicle):
        vehicle.deactivate()
        assert vehicle.service_history == ()

    def test_deactivate_idempotent(self, vehicle):
        vehicle.deactivate("Vendido")
        vehicle.deactivate("Vendido de novo")
        assert len(vehicle.service_history) == 1

    def test_reactivate(self, vehicle):
        vehicle.deactivate()
        vehicle.reactivate()
        assert vehicle.is_active
        assert vehicle.service_history[-1].endswith(REACTIVATION_RECORD)

    def test_inactive_blocks_transfer(self, vehicle):
        vehicle.deactivate()
        with pytest.raises(InactiveVehicle):
            vehicle.transfer_to_customer(new_entity_id())

    def test_update_identification(self, vehicle, make_identification):
        vehicle.update_identification(make_identification(color="Preto"))
        assert vehicle.identification.color == "Preto"

    def test_update_notes(self, vehicle):
        vehicle.update_notes("  Cliente prefere peças originais ")
        assert vehicle.notes == "Cliente prefere peças originais"
