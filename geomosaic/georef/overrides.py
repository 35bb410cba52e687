# -*- coding: utf-8 -*-
"""
Input Georeference Construction - Build an input georef honouring overrides.

Reads the georeference stored with an image source, or builds one from
manual geographic bounds, then applies the optional datum and projection
overrides from ``MosaicOptions``. Overrides reinterpret the pixel transform
in a new CRS; they never resample.

Dependencies
------------
pyproj

Author
------
geoint.org contributors

License
-------
MIT License
Copyright (c) 2024 geoint.org
See LICENSE file for full text.

Created
-------
2026-10-18

Modified
--------
2026-10-18
"""

# Standard library
import logging
from typing import Any, List, TYPE_CHECKING

# geomosaic internal
from geomosaic.georef.affine import AffineGeoReference, projection_terms
from geomosaic.vocabulary import DatumOverride, ProjectionType

if TYPE_CHECKING:
    from geomosaic.IO.base import ImageSource
    from geomosaic.mosaic.options import (
        DatumSettings,
        MosaicOptions,
        ProjectionSettings,
    )

logger = logging.getLogger(__name__)

# Reference sphere radii (metres)
LUNAR_RADIUS = 1737400.0
MARS_RADIUS = 3396190.0


def datum_terms(datum: 'DatumSettings', base_crs: Any = None) -> List[str]:
    """PROJ datum terms for a datum override.

    Parameters
    ----------
    datum : DatumSettings
        Requested override. ``NONE`` keeps the ellipsoid of *base_crs*.
    base_crs : pyproj.CRS, optional
        CRS whose ellipsoid is kept when no override is requested.
        Defaults to WGS84.

    Returns
    -------
    List[str]
        PROJ terms such as ``['+R=1737400.0']``.
    """
    if datum.type is DatumOverride.WGS84:
        return ['+datum=WGS84']
    if datum.type is DatumOverride.LUNAR:
        return [f'+R={LUNAR_RADIUS}']
    if datum.type is DatumOverride.MARS:
        return [f'+R={MARS_RADIUS}']
    if datum.type is DatumOverride.SPHERE:
        return [f'+R={float(datum.sphere_radius)}']
    if base_crs is None or base_crs.ellipsoid is None:
        return ['+datum=WGS84']
    ellipsoid = base_crs.ellipsoid
    return [f'+a={ellipsoid.semi_major_metre}', f'+b={ellipsoid.semi_minor_metre}']


def projection_override_terms(proj: 'ProjectionSettings') -> List[str]:
    """PROJ projection terms for a projection override.

    Returns
    -------
    List[str]
        Empty for ``DEFAULT``, otherwise the ``+proj`` term followed by
        its parameters.
    """
    lat = proj.lat if proj.lat is not None else 0.0
    lon = proj.lon if proj.lon is not None else 0.0
    kind = proj.type

    if kind is ProjectionType.SINUSOIDAL:
        return ['+proj=sinu', f'+lon_0={lon}']
    if kind is ProjectionType.MERCATOR:
        return ['+proj=merc', f'+lat_ts={lat}', f'+lon_0={lon}']
    if kind is ProjectionType.TRANSVERSE_MERCATOR:
        return ['+proj=tmerc', f'+lat_0={lat}', f'+lon_0={lon}', f'+k={proj.scale}']
    if kind is ProjectionType.ORTHOGRAPHIC:
        return ['+proj=ortho', f'+lat_0={lat}', f'+lon_0={lon}']
    if kind is ProjectionType.STEREOGRAPHIC:
        return ['+proj=stere', f'+lat_0={lat}', f'+lon_0={lon}', f'+k={proj.scale}']
    if kind is ProjectionType.LAMBERT_AZIMUTHAL:
        return ['+proj=laea', f'+lat_0={lat}', f'+lon_0={lon}']
    if kind is ProjectionType.LAMBERT_CONFORMAL_CONIC:
        return ['+proj=lcc', f'+lat_1={proj.p1}', f'+lat_2={proj.p2}',
                f'+lat_0={lat}', f'+lon_0={lon}']
    if kind is ProjectionType.UTM:
        terms = ['+proj=utm', f'+zone={abs(proj.utm_zone)}']
        if proj.utm_zone < 0:
            terms.append('+south')
        return terms
    if kind is ProjectionType.PLATE_CARREE:
        return ['+proj=eqc', f'+lat_ts={lat}', f'+lon_0={lon}']
    return []


def make_input_georef(
    source: 'ImageSource',
    options: 'MosaicOptions',
) -> AffineGeoReference:
    """
    Build the georeference of one input image.

    Parameters
    ----------
    source : ImageSource
        The input image.
    options : MosaicOptions
        Validated run options (manual bounds, datum and projection
        overrides).

    Returns
    -------
    AffineGeoReference

    Raises
    ------
    ValidationError
        If the source carries no georeference and no manual bounds are
        given.
    """
    import pyproj

    if options.manual:
        rows, cols = source.get_shape()[:2]
        crs = pyproj.CRS.from_proj4(
            ' '.join(['+proj=longlat'] + datum_terms(options.datum) + ['+no_defs'])
        )
        georef = AffineGeoReference.from_bounds(
            options.west, options.south, options.east, options.north,
            cols, rows, crs,
        )
        logger.debug("Manual georeference for %s: %r", source.name, georef)
    else:
        georef = AffineGeoReference.from_source(source)

    proj_terms = projection_override_terms(options.projection)
    if not proj_terms and options.datum.type is DatumOverride.NONE:
        return georef

    if not proj_terms:
        proj_terms = projection_terms(georef.crs).split()
    terms = proj_terms + datum_terms(options.datum, georef.crs) + ['+no_defs']
    overridden = georef.with_crs(pyproj.CRS.from_proj4(' '.join(terms)))
    logger.debug("Georeference override for %s: %r", source.name, overridden)
    return overridden
