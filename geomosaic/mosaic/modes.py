# -*- coding: utf-8 -*-
"""
Mode Adapter - Per-mode configuration handed to the tile generator.

Each ``MosaicMode`` has one frozen configuration class and one derivation
function; ``derive_mode_config`` selects the function through a dispatch
table, so adding a mode means adding one class and one function.

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
from dataclasses import dataclass
from typing import Callable, Dict, NamedTuple, Optional, Union, TYPE_CHECKING

# geomosaic internal
from geomosaic.exceptions import ValidationError
from geomosaic.geometry import BBox
from geomosaic.vocabulary import MosaicMode

if TYPE_CHECKING:
    from geomosaic.mosaic.options import MosaicOptions
    from geomosaic.mosaic.projection import OutputProjectionSpec


class LonLatBox(NamedTuple):
    """Geographic box in degrees."""

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    @property
    def width(self) -> float:
        return self.max_lon - self.min_lon

    @property
    def height(self) -> float:
        return self.max_lat - self.min_lat


@dataclass(frozen=True)
class NoneModeConfig:
    """Plain quadtree, no georeferenced metadata."""

    mode = MosaicMode.NONE


@dataclass(frozen=True)
class KMLModeConfig:
    """Google Earth KML super-overlay.

    Attributes
    ----------
    longlat_bbox : LonLatBox
        Geographic extent of the aligned output box.
    max_lod_pixels : int
        Region ``maxLodPixels`` value.
    draw_order_offset : int
        Offset added to every tile's draw order.
    """

    longlat_bbox: Optional[LonLatBox]
    max_lod_pixels: int = 1024
    draw_order_offset: int = 0
    mode = MosaicMode.KML


@dataclass(frozen=True)
class TMSModeConfig:
    mode = MosaicMode.TMS


@dataclass(frozen=True)
class UniviewModeConfig:
    module_name: str
    terrain: bool = False
    mode = MosaicMode.UNIVIEW


@dataclass(frozen=True)
class GMapModeConfig:
    mode = MosaicMode.GMAP


@dataclass(frozen=True)
class CelestiaModeConfig:
    module_name: str
    mode = MosaicMode.CELESTIA


@dataclass(frozen=True)
class GigapanModeConfig:
    longlat_bbox: Optional[LonLatBox]
    mode = MosaicMode.GIGAPAN


ModeConfig = Union[
    NoneModeConfig, KMLModeConfig, TMSModeConfig, UniviewModeConfig,
    GMapModeConfig, CelestiaModeConfig, GigapanModeConfig,
]


def longlat_bbox(bbox: BBox, xres: int, yres: int) -> LonLatBox:
    """
    Geographic extent of an output pixel box.

    The output grid spans 360 degrees over ``xres`` columns and 360
    degrees over ``yres`` rows, starting at longitude -180 on the left
    and latitude 180 on the top.

    Examples
    --------
    >>> longlat_bbox(BBox(0, 0, 512, 512), 1024, 1024)
    LonLatBox(min_lon=-180.0, min_lat=0.0, max_lon=0.0, max_lat=180.0)
    """
    min_lon = -180.0 + 360.0 * bbox.min_x / xres
    min_lat = 180.0 - 360.0 * bbox.max_y / yres
    return LonLatBox(
        min_lon,
        min_lat,
        min_lon + 360.0 * bbox.width / xres,
        min_lat + 360.0 * bbox.height / yres,
    )


def data_bbox(canvas_bbox: BBox, aligned_bbox: BBox) -> BBox:
    """Input data extent within the output box.

    Parameters
    ----------
    canvas_bbox : BBox
        Canvas extent after ``prepare``, already relative to the prepared
        origin.
    aligned_bbox : BBox
        The output box the canvas was prepared with.
    """
    return canvas_bbox.intersect(BBox(0, 0, aligned_bbox.width, aligned_bbox.height))


def _none_config(bbox, output, options) -> NoneModeConfig:
    return NoneModeConfig()


def _output_longlat_bbox(bbox, output) -> Optional[LonLatBox]:
    # Pass-through runs have no output projection
    if output is None:
        return None
    return longlat_bbox(bbox, output.xres, output.yres)


def _kml_config(bbox, output, options) -> KMLModeConfig:
    return KMLModeConfig(
        longlat_bbox=_output_longlat_bbox(bbox, output),
        max_lod_pixels=options.kml_max_lod_pixels,
        draw_order_offset=options.kml_draw_order_offset,
    )


def _tms_config(bbox, output, options) -> TMSModeConfig:
    return TMSModeConfig()


def _uniview_config(bbox, output, options) -> UniviewModeConfig:
    return UniviewModeConfig(module_name=options.module_name, terrain=options.terrain)


def _gmap_config(bbox, output, options) -> GMapModeConfig:
    return GMapModeConfig()


def _celestia_config(bbox, output, options) -> CelestiaModeConfig:
    return CelestiaModeConfig(module_name=options.module_name)


def _gigapan_config(bbox, output, options) -> GigapanModeConfig:
    return GigapanModeConfig(longlat_bbox=_output_longlat_bbox(bbox, output))


_MODE_CONFIGS: Dict[MosaicMode, Callable[..., ModeConfig]] = {
    MosaicMode.NONE: _none_config,
    MosaicMode.KML: _kml_config,
    MosaicMode.TMS: _tms_config,
    MosaicMode.UNIVIEW: _uniview_config,
    MosaicMode.GMAP: _gmap_config,
    MosaicMode.CELESTIA: _celestia_config,
    MosaicMode.GIGAPAN: _gigapan_config,
}


def derive_mode_config(
    mode: MosaicMode,
    aligned_bbox: BBox,
    output: Optional['OutputProjectionSpec'],
    options: 'MosaicOptions',
) -> ModeConfig:
    """
    Build the tile-generator configuration of a mode.

    Parameters
    ----------
    mode : MosaicMode
        Output mode.
    aligned_bbox : BBox
        Final output box.
    output : OutputProjectionSpec or None
        Output projection (for ``xres``/``yres``). None on the
        pass-through path, which leaves geographic extents unset.
    options : MosaicOptions
        Run options (KML settings, module name, terrain flag).

    Returns
    -------
    ModeConfig
        The variant matching *mode*.

    Raises
    ------
    ValidationError
        If *mode* is unknown, or a required module name is missing.
    """
    try:
        derive = _MODE_CONFIGS[mode]
    except KeyError:
        raise ValidationError(f"Unknown mosaic mode: {mode!r}") from None
    if mode in (MosaicMode.UNIVIEW, MosaicMode.CELESTIA) and not options.module_name:
        raise ValidationError(f"Mode {mode.value!r} requires module_name")
    return derive(aligned_bbox, output, options)
