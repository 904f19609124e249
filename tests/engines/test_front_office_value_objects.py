"""
Front Office Engine — Vehicle Value Object Tests
================================================
"""

import dataclasses

import pytest

from core.primitives.errors import InvalidFormat, ValidationError
from engines.front_office.value_objects import LicensePlate, VehicleIdentification


class TestLicensePlate:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("ABC1234", "ABC1234"),
            ("abc-1234", "ABC1234"),
            ("  bra2e19 ", "BRA2E19"),
        ],
    )
    def test_normalised(self, raw, expected):
        assert LicensePlate(raw).value == expected

    def test_mercosul_detection(self):
        assert LicensePlate("BRA2E19").is_mercosul
        assert not LicensePlate("ABC1234").is_mercosul

    @pytest.mark.parametrize("raw", ["AB1234", "ABCD123", "1234ABC", "ABC12D3"])
    def test_bad_layout(self, raw):
        with pytest.raises(InvalidFormat, match="license_plate"):
            LicensePlate(raw)

    def test_blank(self):
        with pytest.raises(ValidationError):
            LicensePlate("   ")

    def test_equality_after_normalisation(self):
        assert LicensePlate("abc-1234") == LicensePlate("ABC1234")

    def test_str(self):
        assert str(LicensePlate("abc1d23")) == "ABC1D23"


class TestVehicleIdentification:
    def test_vin_upper_cased(self, make_identification):
        ident = make_identification(vin="9bwzzz377vt004251")
        assert ident.vin == "9BWZZZ377VT004251"

    @pytest.mark.parametrize("vin", ["9BWZZZ377VT00425", "9BWZZZ377VT0042511", "9BWZZZ377VT00425*"])
    def test_bad_vin(self, make_identification, vin):
        with pytest.raises(InvalidFormat, match="vin"):
            make_identification(vin=vin)

    def test_plate_string_is_parsed(self, make_identification):
        ident = make_identification(plate="abc-1234")
        assert isinstance(ident.license_plate, LicensePlate)
        assert ident.license_plate.value == "ABC1234"

    def test_year_upper_bound_is_next_year(self, make_identification):
        # clock fixture: 2026
        assert make_identification(year=2027).year == 2027
        with pytest.raises(ValidationError, match="year"):
            make_identification(year=2028)

    def test_year_lower_bound(self, make_identification):
        assert make_identification(year=1900).year == 1900
        with pytest.raises(ValidationError):
            make_identification(year=1899)

    def test_year_must_be_int(self, make_identification):
        with pytest.raises(ValidationError):
            make_identification(year="2019")

    @pytest.mark.parametrize("field", ["make", "model", "color"])
    def test_required_text(self, make_identification, field):
        with pytest.raises(ValidationError, match=field):
            make_identification(**{field: " "})

    def test_with_color_returns_copy(self, make_identification):
        original = make_identification()
        repainted = original.with_color("Azul")
        assert repainted.color == "Azul"
        assert original.color == "Prata"
        assert repainted.vin == original.vin

    def test_with_license_plate(self, make_identification):
        assert make_identification().with_license_plate("xyz-9876").license_plate.value == "XYZ9876"

    def test_display_string(self, make_identification):
        assert make_identification().to_display_string() == (
            "2019 Volkswagen Gol (Prata) - ABC1D23"
        )

    def test_frozen(self, make_identification):
        with pytest.raises(dataclasses.FrozenInstanceError):
            make_identification().color = "Preto"

    def test_to_dict(self, make_identification):
        d = make_identification().to_dict()
        assert d["license_plate"] == "ABC1D23"
        assert d["year"] == 2019
