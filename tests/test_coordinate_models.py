"""Tests for geodetic <-> cartesian conversion and the radii of curvature."""

import numpy as np
import pytest

from common.config import ConversionConfig
from common.exceptions import ConvergenceFailure, DegenerateInput, InvalidInput, UnknownParameterSet
from common.units import Q_
from geospatial.coordinate_models import (
    SolverTrace,
    cartesian_to_geodetic,
    cartesian_to_geodetic_array,
    eta_squared,
    geodetic_latitude_iteration,
    geodetic_to_cartesian,
    geodetic_to_cartesian_array,
    radius_of_curvature_meridian,
    radius_of_curvature_prime_vertical,
)
from geospatial.parameter_sets import ELLIPSOIDS, PROJECTIONS

from tests.conftest import (
    ARCSEC,
    WORKED_HEIGHT,
    WORKED_LATITUDE,
    WORKED_LONGITUDE,
    WORKED_XYZ,
)

AIRY = ELLIPSOIDS["airy1830"]
GRS80 = ELLIPSOIDS["grs80"]
F0 = PROJECTIONS["national_grid"].scale_factor


class TestRadiiOfCurvature:
    """OS guide Annex C worked example values at 52°39'27.2531"N."""

    def test_nu(self):
        nu = radius_of_curvature_prime_vertical(WORKED_LATITUDE, AIRY, F0)
        assert nu == pytest.approx(6388502.3333, rel=1e-9)

    def test_rho(self):
        rho = radius_of_curvature_meridian(WORKED_LATITUDE, AIRY, F0)
        assert rho == pytest.approx(6372756.4399, rel=1e-9)

    def test_eta_squared(self):
        nu = radius_of_curvature_prime_vertical(WORKED_LATITUDE, AIRY, F0)
        rho = radius_of_curvature_meridian(WORKED_LATITUDE, AIRY, F0)
        assert eta_squared(nu, rho) == pytest.approx(0.0024708136169, rel=1e-7)

    def test_equator_and_pole(self):
        assert radius_of_curvature_prime_vertical(0.0, GRS80) == pytest.approx(GRS80.a)
        pole = radius_of_curvature_prime_vertical(np.pi / 2, GRS80)
        assert pole == pytest.approx(GRS80.a ** 2 / GRS80.b)


class TestGeodeticToCartesian:
    def test_worked_example(self):
        point = geodetic_to_cartesian(WORKED_LONGITUDE, WORKED_LATITUDE, WORKED_HEIGHT, "airy1830")
        assert point.x == pytest.approx(WORKED_XYZ[0], abs=2e-3)
        assert point.y == pytest.approx(WORKED_XYZ[1], abs=2e-3)
        assert point.z == pytest.approx(WORKED_XYZ[2], abs=2e-3)

    def test_default_ellipsoid_is_airy(self):
        explicit = geodetic_to_cartesian(WORKED_LONGITUDE, WORKED_LATITUDE, WORKED_HEIGHT, "airy1830")
        default = geodetic_to_cartesian(WORKED_LONGITUDE, WORKED_LATITUDE, WORKED_HEIGHT)
        assert default == explicit

    def test_accepts_quantities(self):
        lon_deg, lat_deg = np.degrees(WORKED_LONGITUDE), np.degrees(WORKED_LATITUDE)
        point = geodetic_to_cartesian(
            Q_(lon_deg, "degree"), Q_(lat_deg, "degree"), Q_(2.47, "decameter"), "airy1830"
        )
        assert point.x == pytest.approx(WORKED_XYZ[0], abs=1e-3)

    def test_height_defaults_to_surface(self):
        point = geodetic_to_cartesian(0.0, 0.0, ellipsoid="grs80")
        assert (point.x, point.y, point.z) == pytest.approx((GRS80.a, 0.0, 0.0))

    def test_rejects_nan(self):
        with pytest.raises(InvalidInput):
            geodetic_to_cartesian(float("nan"), 0.0, 0.0)

    def test_unknown_ellipsoid(self):
        with pytest.raises(UnknownParameterSet):
            geodetic_to_cartesian(0.0, 0.0, 0.0, "bessel1841")

    def test_array_form(self):
        lons = np.array([WORKED_LONGITUDE, 0.0])
        lats = np.array([WORKED_LATITUDE, 0.0])
        heights = np.array([WORKED_HEIGHT, 0.0])
        x, y, z = geodetic_to_cartesian_array(lons, lats, heights, AIRY)
        assert x[0] == pytest.approx(WORKED_XYZ[0], abs=1e-3)
        assert x[1] == pytest.approx(AIRY.a)


class TestCartesianToGeodetic:
    def test_worked_example(self):
        point = cartesian_to_geodetic(*WORKED_XYZ, ellipsoid="airy1830")
        assert point.latitude == pytest.approx(WORKED_LATITUDE, abs=1e-3 * ARCSEC)
        assert point.longitude == pytest.approx(WORKED_LONGITUDE, abs=1e-3 * ARCSEC)
        assert point.height == pytest.approx(WORKED_HEIGHT, abs=1e-3)

    @pytest.mark.parametrize("longitude", [0.3, 1.9, 3.0, -0.4, -1.7, -3.1])
    def test_all_quadrants(self, longitude):
        latitude = -0.6
        cartesian = geodetic_to_cartesian(longitude, latitude, 150.0, "grs80")
        point = cartesian_to_geodetic(cartesian.x, cartesian.y, cartesian.z, "grs80")
        assert point.longitude == pytest.approx(longitude, abs=1e-12)
        assert point.latitude == pytest.approx(latitude, abs=1e-10)
        assert point.height == pytest.approx(150.0, abs=1e-4)

    def test_zero_x_is_not_degenerate(self):
        point = cartesian_to_geodetic(0.0, GRS80.a, 0.0, "grs80")
        assert point.longitude == pytest.approx(np.pi / 2)
        assert point.latitude == pytest.approx(0.0)

    def test_pole_limit(self):
        point = cartesian_to_geodetic(0.0, 0.0, AIRY.b + 10.0, "airy1830")
        assert point.latitude == pytest.approx(np.pi / 2)
        assert point.longitude == 0.0
        assert point.height == pytest.approx(10.0, abs=1e-6)

    def test_south_pole_limit(self):
        point = cartesian_to_geodetic(0.0, 0.0, -AIRY.b, "airy1830")
        assert point.latitude == pytest.approx(-np.pi / 2)
        assert point.height == pytest.approx(0.0, abs=1e-6)

    def test_geocentre_is_degenerate(self):
        with pytest.raises(DegenerateInput):
            cartesian_to_geodetic(0.0, 0.0, 0.0)

    def test_rejects_infinite(self):
        with pytest.raises(InvalidInput):
            cartesian_to_geodetic(float("inf"), 0.0, 0.0)

    def test_rejects_non_numeric(self):
        with pytest.raises(InvalidInput):
            cartesian_to_geodetic("3874938.849", 0.0, 0.0)

    def test_iteration_bound(self):
        config = ConversionConfig(max_iterations=1)
        with pytest.raises(ConvergenceFailure) as excinfo:
            cartesian_to_geodetic(*WORKED_XYZ, ellipsoid="airy1830", config=config)
        assert excinfo.value.iterations == 1
        assert excinfo.value.solver == "cartesian_to_geodetic"

    def test_array_form(self):
        x = np.array([WORKED_XYZ[0], 0.0])
        y = np.array([WORKED_XYZ[1], 0.0])
        z = np.array([WORKED_XYZ[2], AIRY.b])
        lat, lon, height = cartesian_to_geodetic_array(x, y, z, AIRY)
        assert lat[0] == pytest.approx(WORKED_LATITUDE, abs=1e-3 * ARCSEC)
        assert lat[1] == pytest.approx(np.pi / 2)
        np.testing.assert_allclose(height, [WORKED_HEIGHT, 0.0], atol=1e-3)


class TestLatitudeIteration:
    @pytest.mark.parametrize("latitude_deg", [0.5, 25.0, 52.6, 70.0, 89.0, -45.0])
    def test_successive_differences_decrease(self, latitude_deg):
        cartesian = geodetic_to_cartesian(0.1, np.radians(latitude_deg), 500.0, "airy1830")
        p = np.hypot(cartesian.x, cartesian.y)
        _, _, trace = geodetic_latitude_iteration(cartesian.z, p, AIRY)
        assert trace.converged
        assert trace.iterations < 10
        assert trace.is_monotonic()

    def test_trace_properties(self):
        trace = SolverTrace(solver="demo", residuals=[1.0, 0.1, 0.01])
        assert trace.iterations == 3
        assert trace.final_residual == 0.01
        assert trace.is_monotonic()
        assert not SolverTrace(solver="demo", residuals=[1.0, 1.0]).is_monotonic()
        assert SolverTrace(solver="demo").final_residual is None
