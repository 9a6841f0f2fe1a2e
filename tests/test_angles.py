"""Tests for angle helpers, DMS conversion and unit handling."""

import numpy as np
import pytest

from common.angles import (
    decimal_from_dms,
    dms_from_decimal,
    sec,
    sin2,
    tan2,
    tan4,
    tan6,
    to_degrees,
    to_radians,
)
from common.exceptions import InvalidInput
from common.types import GeodeticPoint
from common.units import STANDARD_UNITS, Q_, arcseconds_to_radians, as_magnitude, ppm_to_scale


class TestDegreesRadians:
    def test_known_values(self):
        assert to_radians(180) == pytest.approx(np.pi)
        assert to_radians(0) == 0
        assert to_radians(90) == pytest.approx(np.pi / 2)

    def test_to_degrees(self):
        assert to_degrees(np.pi) == pytest.approx(180)
        assert to_degrees(0) == 0
        assert to_degrees(np.pi / 2) == pytest.approx(90)

    def test_arrays(self):
        values = np.array([-90.0, 0.0, 45.0])
        np.testing.assert_allclose(to_degrees(to_radians(values)), values)


class TestDMS:
    @pytest.mark.parametrize("degrees", range(-180, 181, 7))
    def test_whole_degrees_unchanged(self, degrees):
        assert decimal_from_dms(degrees, 0, 0) == degrees

    def test_seconds(self):
        assert decimal_from_dms(15, 0, 3) == pytest.approx(15.00083333333333)

    def test_ranges_not_validated(self):
        assert decimal_from_dms(0, 90, 0) == pytest.approx(1.5)

    def test_split_worked_latitude(self):
        d, m, s = dms_from_decimal(decimal_from_dms(52, 39, 27.2531))
        assert (d, m) == (52, 39)
        assert s == pytest.approx(27.2531, abs=1e-9)

    def test_negative_sign_on_first_nonzero_field(self):
        assert dms_from_decimal(-0.5) == pytest.approx((0.0, -30.0, 0.0))
        d, m, s = dms_from_decimal(-2.25)
        assert (d, m, s) == pytest.approx((-2.0, 15.0, 0.0))


class TestTrigShorthands:
    def test_powers(self):
        x = 0.7
        assert sin2(x) == pytest.approx(np.sin(x) ** 2)
        assert tan2(x) == pytest.approx(np.tan(x) ** 2)
        assert tan4(x) == pytest.approx(np.tan(x) ** 4)
        assert tan6(x) == pytest.approx(np.tan(x) ** 6)

    def test_sec(self):
        assert sec(0.0) == 1.0
        assert sec(np.pi / 3) == pytest.approx(2.0)


class TestUnits:
    def test_bare_number_passes_through(self):
        assert as_magnitude(24.7, "meter") == 24.7

    def test_quantity_converted(self):
        assert as_magnitude(Q_(180, "degree"), "radian") == pytest.approx(np.pi)
        assert as_magnitude(Q_(1.5, "km"), "meter") == pytest.approx(1500.0)

    def test_incompatible_quantity_rejected(self):
        with pytest.raises(InvalidInput):
            as_magnitude(Q_(1.0, "meter"), "radian")

    def test_arcseconds(self):
        assert arcseconds_to_radians(3600.0) == pytest.approx(np.radians(1.0))

    def test_ppm(self):
        assert ppm_to_scale(20.4894) == pytest.approx(20.4894e-6)

    def test_standard_units_are_known_to_the_registry(self):
        for unit in STANDARD_UNITS.values():
            assert Q_(1.0, unit).magnitude == 1.0
        assert as_magnitude(Q_(3600.0, "arcsecond"), STANDARD_UNITS["latitude"]) == pytest.approx(
            np.radians(1.0)
        )


class TestGeodeticPointDMS:
    def test_worked_example(self):
        point = GeodeticPoint(
            latitude=np.radians(decimal_from_dms(52, 39, 27.2531)),
            longitude=np.radians(decimal_from_dms(1, 43, 4.5177)),
        )
        (lat_d, lat_m, lat_s), (lon_d, lon_m, lon_s) = point.to_dms()
        assert (lat_d, lat_m, lon_d, lon_m) == (52, 39, 1, 43)
        assert lat_s == pytest.approx(27.2531, abs=1e-6)
        assert lon_s == pytest.approx(4.5177, abs=1e-6)

    def test_western_longitude_carries_sign(self):
        _, longitude = GeodeticPoint.from_degrees(54.5, -3.25).to_dms()
        assert longitude == pytest.approx((-3.0, 15.0, 0.0))
