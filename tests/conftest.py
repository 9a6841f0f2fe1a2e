"""Shared fixtures: the Ordnance Survey worked examples and sample grid points."""

import numpy as np
import pytest

from common.angles import decimal_from_dms
from common.types import GridPoint

# OS Guide to Coordinate Systems in Great Britain, Annex B and C examples
WORKED_NORTHINGS = 313177.270
WORKED_EASTINGS = 651409.903
WORKED_LATITUDE = np.radians(decimal_from_dms(52, 39, 27.2531))
WORKED_LONGITUDE = np.radians(decimal_from_dms(1, 43, 4.5177))
WORKED_HEIGHT = 24.7
WORKED_XYZ = (3874938.849, 116218.624, 5047168.208)

# One arc-second in radians
ARCSEC = np.radians(1.0 / 3600.0)

NATIONAL_GRID_SAMPLES = [
    (313177.270, 651409.903),   # Caister-on-Sea (worked example)
    (180000.0, 530000.0),       # London
    (398000.0, 384000.0),       # Manchester
    (665000.0, 326000.0),       # Edinburgh
    (1140000.0, 460000.0),      # Orkney
    (15000.0, 140000.0),        # Isles of Scilly
    (760000.0, 90000.0),        # Outer Hebrides
    (100.0, 700000.0),          # south-east corner of the grid
]

IRISH_GRID_SAMPLES = [
    (234000.0, 315000.0),       # Dublin
    (70000.0, 167000.0),        # Cork
    (225000.0, 130000.0),       # Galway
    (374000.0, 333000.0),       # Belfast
    (450000.0, 240000.0),       # Malin Head
]


@pytest.fixture()
def worked_grid_point():
    return GridPoint(northings=WORKED_NORTHINGS, eastings=WORKED_EASTINGS)


@pytest.fixture(params=NATIONAL_GRID_SAMPLES, ids=lambda p: f"N{p[0]:.0f}E{p[1]:.0f}")
def national_grid_sample(request):
    northings, eastings = request.param
    return GridPoint(northings=northings, eastings=eastings)


@pytest.fixture(params=IRISH_GRID_SAMPLES, ids=lambda p: f"N{p[0]:.0f}E{p[1]:.0f}")
def irish_grid_sample(request):
    northings, eastings = request.param
    return GridPoint(northings=northings, eastings=eastings)
