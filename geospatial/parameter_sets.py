"""
Named Parameter Sets: Ellipsoids, Grid Projections, Datums, Helmert Shifts.

The tables in this module are built once at import and exposed as read-only
mappings. Lookups are explicit: an unknown key raises UnknownParameterSet
unless the caller's configuration opts into falling back to the configured
default, in which case the substitution is logged.

Key Format
----------
Keys are matched case-insensitively. Transformation keys name a datum pair;
``'etrs89→osgb36'``, ``'etrs89->osgb36'`` and ``'etrs89_to_osgb36'`` are the
same key.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Union

import numpy as np

from common.config import ConversionConfig, resolve_config
from common.constants import GeodeticConstants as GC
from common.exceptions import InvalidInput, UnknownParameterSet
from common.logging_config import get_logger
from common.types import require_finite

logger = get_logger(__name__)

PAIR_SEPARATOR = "→"


@dataclass(frozen=True)
class Ellipsoid:
    """Parameters defining a reference ellipsoid.
    
    Attributes
    ----------
    name : str
        Identifier for the ellipsoid.
    semi_major_axis : float
        a, in metres.
    semi_minor_axis : float
        b, in metres.
        
    Derived Parameters
    ------------------
    eccentricity_squared : float
        e² = (a² - b²) / a²
    n : float
        (a - b) / (a + b), the expansion variable of the meridional arc.
    flattening : float
        f = (a - b) / a
    """
    name: str
    semi_major_axis: float
    semi_minor_axis: float
    
    def __post_init__(self):
        require_finite(semi_major_axis=self.semi_major_axis, semi_minor_axis=self.semi_minor_axis)
        if not self.semi_major_axis > self.semi_minor_axis > 0:
            raise InvalidInput(
                f"Ellipsoid {self.name!r} requires a > b > 0, got "
                f"a={self.semi_major_axis}, b={self.semi_minor_axis}"
            )
    
    @property
    def a(self) -> float:
        return self.semi_major_axis
    
    @property
    def b(self) -> float:
        return self.semi_minor_axis
    
    @property
    def eccentricity_squared(self) -> float:
        a, b = self.semi_major_axis, self.semi_minor_axis
        return (a * a - b * b) / (a * a)
    
    @property
    def n(self) -> float:
        a, b = self.semi_major_axis, self.semi_minor_axis
        return (a - b) / (a + b)
    
    @property
    def flattening(self) -> float:
        return (self.semi_major_axis - self.semi_minor_axis) / self.semi_major_axis


@dataclass(frozen=True)
class TransverseMercatorParameters:
    """Parameters of a Transverse Mercator grid.
    
    Attributes
    ----------
    name : str
        Registry key of the grid.
    scale_factor : float
        F0, scale factor on the central meridian.
    true_origin_latitude : float
        phi0 in DEGREES.
    true_origin_longitude : float
        lambda0 in DEGREES (also the central meridian).
    false_easting : float
        E0, grid easting of the true origin in metres.
    false_northing : float
        N0, grid northing of the true origin in metres.
    ellipsoid : str
        Registry key of the ellipsoid the grid is defined on.
    datum : str
        Registry key of the datum the grid belongs to.
    """
    name: str
    scale_factor: float
    true_origin_latitude: float
    true_origin_longitude: float
    false_easting: float
    false_northing: float
    ellipsoid: str
    datum: str
    
    def __post_init__(self):
        require_finite(
            scale_factor=self.scale_factor,
            true_origin_latitude=self.true_origin_latitude,
            true_origin_longitude=self.true_origin_longitude,
            false_easting=self.false_easting,
            false_northing=self.false_northing,
        )
        if self.scale_factor <= 0:
            raise InvalidInput(
                f"Projection {self.name!r} requires scale_factor > 0, got {self.scale_factor}"
            )
    
    @property
    def phi0(self) -> float:
        """Latitude of true origin in radians."""
        return float(np.radians(self.true_origin_latitude))
    
    @property
    def lambda0(self) -> float:
        """Longitude of true origin in radians."""
        return float(np.radians(self.true_origin_longitude))


@dataclass(frozen=True)
class HelmertParameters:
    """One-directional seven-parameter similarity transformation.
    
    Attributes
    ----------
    tx, ty, tz : float
        Translations in METRES.
    rx, ry, rz : float
        Rotations in ARC-SECONDS (position vector convention).
    s : float
        Scale change in PARTS PER MILLION.
    name : str
        Registry key, e.g. 'etrs89→osgb36'. Empty for ad-hoc parameters.
    """
    tx: float
    ty: float
    tz: float
    rx: float
    ry: float
    rz: float
    s: float
    name: str = ""
    
    def __post_init__(self):
        require_finite(
            tx=self.tx, ty=self.ty, tz=self.tz,
            rx=self.rx, ry=self.ry, rz=self.rz, s=self.s,
        )
    
    @classmethod
    def from_tuple(cls, values: Tuple[float, ...], name: str = "") -> 'HelmertParameters':
        """Build from (tx, ty, tz, rx, ry, rz, s)."""
        tx, ty, tz, rx, ry, rz, s = values
        return cls(tx=tx, ty=ty, tz=tz, rx=rx, ry=ry, rz=rz, s=s, name=name)
    
    def as_tuple(self) -> Tuple[float, ...]:
        return (self.tx, self.ty, self.tz, self.rx, self.ry, self.rz, self.s)
    
    def inverse(self, name: str = "") -> 'HelmertParameters':
        """Return the reverse transformation by negating all seven parameters.
        
        This is the conventional small-angle approximation, not an exact
        matrix inverse. A forward-then-negated round trip is off by the
        second-order terms, a few centimetres for the published British and
        Irish shifts; use ``geospatial.helmert.apply_inverse_helmert`` when
        the exact reverse is needed.
        """
        if not name and PAIR_SEPARATOR in self.name:
            source, target = self.name.split(PAIR_SEPARATOR)
            name = transformation_key(target, source)
        return HelmertParameters.from_tuple(tuple(-v for v in self.as_tuple()), name=name)


# =============================================================================
# Key handling
# =============================================================================

def _normalise_key(key: str) -> str:
    key = key.strip().lower()
    for separator in ("->", "_to_"):
        key = key.replace(separator, PAIR_SEPARATOR)
    return key


def transformation_key(source_datum: str, target_datum: str) -> str:
    """Registry key for the transformation from one datum to another."""
    return f"{_normalise_key(source_datum)}{PAIR_SEPARATOR}{_normalise_key(target_datum)}"


# =============================================================================
# Tables
# =============================================================================

ELLIPSOIDS: Mapping[str, Ellipsoid] = MappingProxyType({
    "airy1830": Ellipsoid(
        name="airy1830",
        semi_major_axis=GC.AIRY_1830_SEMI_MAJOR_AXIS.value,
        semi_minor_axis=GC.AIRY_1830_SEMI_MINOR_AXIS.value,
    ),
    "airy1830_modified": Ellipsoid(
        name="airy1830_modified",
        semi_major_axis=GC.AIRY_1830_MODIFIED_SEMI_MAJOR_AXIS.value,
        semi_minor_axis=GC.AIRY_1830_MODIFIED_SEMI_MINOR_AXIS.value,
    ),
    "grs80": Ellipsoid(
        name="grs80",
        semi_major_axis=GC.GRS80_SEMI_MAJOR_AXIS.value,
        semi_minor_axis=GC.GRS80_SEMI_MINOR_AXIS.value,
    ),
    "wgs84": Ellipsoid(
        name="wgs84",
        semi_major_axis=GC.WGS84_SEMI_MAJOR_AXIS.value,
        semi_minor_axis=GC.WGS84_SEMI_MINOR_AXIS.value,
    ),
})

PROJECTIONS: Mapping[str, TransverseMercatorParameters] = MappingProxyType({
    "national_grid": TransverseMercatorParameters(
        name="national_grid",
        scale_factor=GC.NATIONAL_GRID_SCALE_FACTOR.value,
        true_origin_latitude=GC.NATIONAL_GRID_TRUE_ORIGIN_LATITUDE.value,
        true_origin_longitude=GC.NATIONAL_GRID_TRUE_ORIGIN_LONGITUDE.value,
        false_easting=GC.NATIONAL_GRID_FALSE_EASTING.value,
        false_northing=GC.NATIONAL_GRID_FALSE_NORTHING.value,
        ellipsoid="airy1830",
        datum="osgb36",
    ),
    "irish_national_grid": TransverseMercatorParameters(
        name="irish_national_grid",
        scale_factor=GC.IRISH_GRID_SCALE_FACTOR.value,
        true_origin_latitude=GC.IRISH_GRID_TRUE_ORIGIN_LATITUDE.value,
        true_origin_longitude=GC.IRISH_GRID_TRUE_ORIGIN_LONGITUDE.value,
        false_easting=GC.IRISH_GRID_FALSE_EASTING.value,
        false_northing=GC.IRISH_GRID_FALSE_NORTHING.value,
        ellipsoid="airy1830_modified",
        datum="ire65",
    ),
})

# Datum -> ellipsoid it is realised on. WGS84 shares GRS80 to sub-millimetre.
DATUMS: Mapping[str, str] = MappingProxyType({
    "osgb36": "airy1830",
    "ire65": "airy1830_modified",
    "etrs89": "grs80",
    "wgs84": "wgs84",
})


def _build_transformations() -> Mapping[str, HelmertParameters]:
    etrs89_to_osgb36 = HelmertParameters.from_tuple(
        GC.HELMERT_ETRS89_TO_OSGB36, name=transformation_key("etrs89", "osgb36")
    )
    ire65_to_etrs89 = HelmertParameters.from_tuple(
        GC.HELMERT_IRE65_TO_ETRS89, name=transformation_key("ire65", "etrs89")
    )
    table = {}
    for params in (etrs89_to_osgb36, ire65_to_etrs89):
        inverse = params.inverse()
        table[params.name] = params
        table[inverse.name] = inverse
    return MappingProxyType(table)


HELMERT_TRANSFORMATIONS: Mapping[str, HelmertParameters] = _build_transformations()


# =============================================================================
# Lookups
# =============================================================================

def _lookup(kind: str, table: Mapping, key: Optional[str], default: Optional[str],
            fallback: bool):
    if key is None:
        if default is None:
            raise UnknownParameterSet(kind, key, table.keys())
        key = default
    if not isinstance(key, str):
        raise UnknownParameterSet(kind, key, table.keys())
    
    normalised = _normalise_key(key)
    if normalised in table:
        return table[normalised]
    
    if fallback and default is not None:
        logger.warning(f"Unknown {kind} {key!r}; falling back to {default!r}")
        return table[_normalise_key(default)]
    
    logger.error(f"Unknown {kind} {key!r}")
    raise UnknownParameterSet(kind, key, table.keys())


def get_ellipsoid(
    key: Union[str, Ellipsoid, None] = None,
    config: Optional[ConversionConfig] = None
) -> Ellipsoid:
    """Resolve an ellipsoid key (or pass an Ellipsoid through).
    
    Parameters
    ----------
    key : str, Ellipsoid or None
        Registry key; None selects ``config.default_ellipsoid``.
    config : ConversionConfig, optional
        Supplies the default and the fallback policy.
        
    Raises
    ------
    UnknownParameterSet
        If the key is not registered and fallback is disabled.
    """
    if isinstance(key, Ellipsoid):
        return key
    config = resolve_config(config)
    return _lookup("ellipsoid", ELLIPSOIDS, key, config.default_ellipsoid,
                   config.fallback_to_default)


def get_projection(
    key: Union[str, TransverseMercatorParameters, None] = None,
    config: Optional[ConversionConfig] = None
) -> TransverseMercatorParameters:
    """Resolve a projection key (or pass parameters through).
    
    None selects ``config.default_projection``. Unknown keys raise
    UnknownParameterSet unless ``config.fallback_to_default`` is set.
    """
    if isinstance(key, TransverseMercatorParameters):
        return key
    config = resolve_config(config)
    return _lookup("projection", PROJECTIONS, key, config.default_projection,
                   config.fallback_to_default)


def get_transformation(
    key: Union[str, HelmertParameters, None],
    config: Optional[ConversionConfig] = None
) -> HelmertParameters:
    """Resolve a Helmert transformation key (or pass parameters through).
    
    There is no default transformation and no fallback: applying the wrong
    datum shift silently moves points by up to ~100 m.
    """
    if isinstance(key, HelmertParameters):
        return key
    return _lookup("transformation", HELMERT_TRANSFORMATIONS, key, None, False)


def get_datum_ellipsoid(datum: str) -> Ellipsoid:
    """Return the ellipsoid a datum is realised on."""
    ellipsoid_key = _lookup("datum", DATUMS, datum, None, False)
    return ELLIPSOIDS[ellipsoid_key]
