"""Tests for the composed datum conversion pipeline."""

import numpy as np
import pytest
from pyproj import CRS, Transformer

from common.exceptions import UnknownParameterSet
from common.types import GeodeticPoint, GridPoint
from geospatial.coordinate_models import cartesian_to_geodetic, geodetic_to_cartesian
from geospatial.datum_conversion import (
    convert_datum,
    convert_datum_batch,
    etrs89_to_grid,
    to_etrs89,
    to_local_geodetic,
    to_wgs84,
    transform_geodetic,
)
from geospatial.projections import grid_to_geodetic

from tests.conftest import ARCSEC, IRISH_GRID_SAMPLES, NATIONAL_GRID_SAMPLES

OSGB36_PROJ = (
    "+proj=longlat +a=6377563.396 +b=6356256.909 "
    "+towgs84=446.448,-125.157,542.060,0.1502,0.2470,0.8421,-20.4894 +no_defs"
)
IRE65_PROJ = (
    "+proj=longlat +a=6377340.189 +b=6356034.447 "
    "+towgs84=482.530,-130.596,564.557,-1.042,-0.214,-0.631,8.150 +no_defs"
)
ETRS89_PROJ = "+proj=longlat +ellps=GRS80 +towgs84=0,0,0,0,0,0,0 +no_defs"


def _pyproj_shift(proj_string, point):
    transformer = Transformer.from_crs(
        CRS.from_proj4(proj_string), CRS.from_proj4(ETRS89_PROJ), always_xy=True
    )
    lat_deg, lon_deg = point.to_degrees()
    lon, lat = transformer.transform(lon_deg, lat_deg)
    return lat, lon


class TestRoundTrip:
    """grid -> geodetic -> cartesian -> geodetic -> cartesian recovers the point."""

    @pytest.mark.parametrize("projection, samples", [
        ("national_grid", NATIONAL_GRID_SAMPLES),
        ("irish_national_grid", IRISH_GRID_SAMPLES),
    ])
    def test_geodetic_round_trip(self, projection, samples):
        for northings, eastings in samples:
            point = grid_to_geodetic(northings, eastings, projection)
            ellipsoid = "airy1830" if projection == "national_grid" else "airy1830_modified"
            
            cartesian = geodetic_to_cartesian(point.longitude, point.latitude, 0.0, ellipsoid)
            recovered = cartesian_to_geodetic(cartesian.x, cartesian.y, cartesian.z, ellipsoid)
            again = geodetic_to_cartesian(
                recovered.longitude, recovered.latitude, recovered.height, ellipsoid
            )
            
            assert recovered.latitude == pytest.approx(point.latitude, abs=1e-9)
            assert recovered.longitude == pytest.approx(point.longitude, abs=1e-9)
            assert recovered.height == pytest.approx(0.0, abs=1e-3)
            assert again.distance_to(cartesian) < 1e-3


class TestConvertDatum:
    def test_matches_pyproj_for_osgb36(self, national_grid_sample):
        result = convert_datum(
            national_grid_sample, "national_grid", "airy1830", "grs80", "osgb36→etrs89"
        )
        local = to_local_geodetic(national_grid_sample, "national_grid")
        lat_deg, lon_deg = _pyproj_shift(OSGB36_PROJ, local)
        
        lat, lon = result.to_degrees()
        assert lat == pytest.approx(lat_deg, abs=1e-7)
        assert lon == pytest.approx(lon_deg, abs=1e-7)

    def test_matches_pyproj_for_ire65(self, irish_grid_sample):
        result = convert_datum(
            irish_grid_sample, "irish_national_grid", "airy1830_modified", "grs80", "ire65→etrs89"
        )
        local = to_local_geodetic(irish_grid_sample, "irish_national_grid")
        lat_deg, lon_deg = _pyproj_shift(IRE65_PROJ, local)
        
        lat, lon = result.to_degrees()
        assert lat == pytest.approx(lat_deg, abs=1e-7)
        assert lon == pytest.approx(lon_deg, abs=1e-7)

    def test_shift_is_metre_scale(self, worked_grid_point):
        local = to_local_geodetic(worked_grid_point)
        shifted = convert_datum(
            worked_grid_point, "national_grid", "airy1830", "grs80", "osgb36→etrs89"
        )
        # OSGB36 and ETRS89 differ by up to ~120 m on the ground, ~5 arc-seconds
        assert 0.5 * ARCSEC < abs(shifted.longitude - local.longitude) < 10 * ARCSEC
        assert abs(shifted.latitude - local.latitude) < 10 * ARCSEC

    def test_height_carried_through(self, worked_grid_point):
        low = convert_datum(worked_grid_point, "national_grid", "airy1830", "grs80",
                            "osgb36→etrs89", height=0.0)
        high = convert_datum(worked_grid_point, "national_grid", "airy1830", "grs80",
                             "osgb36→etrs89", height=100.0)
        assert high.height - low.height == pytest.approx(100.0, abs=0.01)

    def test_unknown_transformation(self, worked_grid_point):
        with pytest.raises(UnknownParameterSet):
            convert_datum(worked_grid_point, "national_grid", "airy1830", "grs80", "osgb36→wgs72")

    def test_batch_matches_scalar(self):
        northings = np.array([n for n, _ in NATIONAL_GRID_SAMPLES])
        eastings = np.array([e for _, e in NATIONAL_GRID_SAMPLES])
        latitudes, longitudes, heights = convert_datum_batch(
            northings, eastings, "national_grid", "airy1830", "grs80", "osgb36→etrs89",
            heights=10.0,
        )
        
        assert latitudes.shape == northings.shape
        for i, (n, e) in enumerate(NATIONAL_GRID_SAMPLES):
            point = convert_datum(GridPoint(n, e), "national_grid", "airy1830", "grs80",
                                  "osgb36→etrs89", height=10.0)
            assert latitudes[i] == pytest.approx(point.latitude, abs=1e-10)
            assert longitudes[i] == pytest.approx(point.longitude, abs=1e-10)
            assert heights[i] == pytest.approx(point.height, abs=1e-4)


class TestConvenience:
    def test_to_etrs89_uses_registered_datum(self, worked_grid_point):
        expected = convert_datum(
            worked_grid_point, "national_grid", "airy1830", "grs80", "osgb36→etrs89"
        )
        assert to_etrs89(worked_grid_point) == expected

    def test_to_etrs89_irish_grid(self):
        grid_point = GridPoint(*IRISH_GRID_SAMPLES[0])
        expected = convert_datum(
            grid_point, "irish_national_grid", "airy1830_modified", "grs80", "ire65→etrs89"
        )
        assert to_etrs89(grid_point, "irish_national_grid") == expected

    def test_to_wgs84_is_etrs89(self, worked_grid_point):
        assert to_wgs84(worked_grid_point) == to_etrs89(worked_grid_point)

    def test_to_local_geodetic(self, worked_grid_point):
        expected = grid_to_geodetic(worked_grid_point.northings, worked_grid_point.eastings)
        assert to_local_geodetic(worked_grid_point) == expected

    @pytest.mark.parametrize("projection, samples", [
        ("national_grid", NATIONAL_GRID_SAMPLES[:4]),
        ("irish_national_grid", IRISH_GRID_SAMPLES[:3]),
    ])
    def test_etrs89_to_grid_round_trip(self, projection, samples):
        for northings, eastings in samples:
            etrs89 = to_etrs89(GridPoint(northings, eastings), projection)
            back, local_height = etrs89_to_grid(etrs89, projection)
            # the registered reverse shift is a first-order inverse
            assert back.northings == pytest.approx(northings, abs=0.05)
            assert back.eastings == pytest.approx(eastings, abs=0.05)
            assert local_height == pytest.approx(0.0, abs=0.05)

    def test_transform_geodetic_identity_shift(self):
        from geospatial.parameter_sets import HelmertParameters
        
        identity = HelmertParameters(tx=0, ty=0, tz=0, rx=0, ry=0, rz=0, s=0)
        point = GeodeticPoint.from_degrees(54.0, -3.0, 12.0)
        result = transform_geodetic(point, "grs80", "grs80", identity)
        assert result.latitude == pytest.approx(point.latitude, abs=1e-11)
        assert result.longitude == pytest.approx(point.longitude, abs=1e-12)
        assert result.height == pytest.approx(12.0, abs=1e-6)
