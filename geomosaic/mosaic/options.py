# -*- coding: utf-8 -*-
"""
Mosaic Options - Run configuration and its validation.

``MosaicOptions`` gathers every knob of a mosaic run: inputs, output naming,
pixel rescaling, nodata, georeference overrides, mode, and blending.
``validate()`` rejects inconsistent combinations before any reprojection
work begins and fills derived defaults (output name, global bounds).

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
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

# geomosaic internal
from geomosaic.exceptions import ValidationError
from geomosaic.IO.base import ImageSource
from geomosaic.vocabulary import (
    ChannelType,
    DatumOverride,
    Interpolation,
    MosaicMode,
    ProjectionType,
)

InputLike = Union[str, Path, ImageSource]


@dataclass
class ProjectionSettings:
    """Projection override applied to every input georeference.

    Parameters
    ----------
    type : ProjectionType
        Projection to assign. ``DEFAULT`` keeps each input's own.
    lat, lon : float, optional
        Projection centre (degrees).
    scale : float
        Scale factor for projections that take one.
    p1, p2 : float, optional
        Standard parallels for Lambert conformal conic.
    utm_zone : int, optional
        UTM zone; negative for the southern hemisphere.
    """

    type: ProjectionType = ProjectionType.DEFAULT
    lat: Optional[float] = None
    lon: Optional[float] = None
    scale: float = 1.0
    p1: Optional[float] = None
    p2: Optional[float] = None
    utm_zone: Optional[int] = None


@dataclass
class DatumSettings:
    """Datum override applied to every input georeference."""

    type: DatumOverride = DatumOverride.NONE
    sphere_radius: Optional[float] = None


@dataclass
class MosaicOptions:
    """Configuration of one mosaic run.

    Parameters
    ----------
    inputs : List[str, Path or ImageSource]
        Input rasters. Paths are opened as GeoTIFFs.
    output_name : str, optional
        Name handed to the tile generator. Defaults to the first input's
        stem.
    file_type : str
        Tile file type handed to the tile generator.
    tile_size : int
        Tile edge in pixels.
    module_name : str, optional
        Module name for Uniview and Celestia output.
    pixel_scale, pixel_offset : float, optional
        Linear rescale ``value * scale + offset`` applied to inputs.
    nodata : float, optional
        Explicit nodata value; overrides the value stored in the sources.
    normalize : bool
        Stretch the global input value range to the channel range.
    aspect_ratio : int
        Ratio of output height to primary output width.
    global_resolution : int, optional
        Force the total output resolution.
    north, south, east, west : float, optional
        Manual geographic bounds for a single input.
    global_ : bool
        Shorthand for manual bounds covering the whole globe.
    channel_type : ChannelType
        Working channel type. ``NONE`` keeps the first input's.
    mode : MosaicMode
        Output mode.
    multiband : bool
        Blend overlaps instead of drawing in draft mode.
    interpolation : Interpolation
        Resampling kernel used when warping inputs.
    terrain : bool
        Uniview terrain flag.
    kml_max_lod_pixels, kml_draw_order_offset : int
        KML region and draw-order settings.
    projection : ProjectionSettings
        Projection override.
    datum : DatumSettings
        Datum override.
    max_workers : int
        Worker threads used for per-image reprojection.

    Examples
    --------
    >>> opts = MosaicOptions(inputs=['a.tif', 'b.tif'], mode=MosaicMode.KML)
    >>> opts.validate()
    >>> opts.output_name
    'a'
    """

    inputs: List[InputLike] = field(default_factory=list)
    output_name: Optional[str] = None
    file_type: str = 'png'
    tile_size: int = 256
    module_name: Optional[str] = None
    pixel_scale: Optional[float] = None
    pixel_offset: Optional[float] = None
    nodata: Optional[float] = None
    normalize: bool = False
    aspect_ratio: int = 1
    global_resolution: Optional[int] = None
    north: Optional[float] = None
    south: Optional[float] = None
    east: Optional[float] = None
    west: Optional[float] = None
    global_: bool = False
    channel_type: ChannelType = ChannelType.NONE
    mode: MosaicMode = MosaicMode.KML
    multiband: bool = False
    interpolation: Interpolation = Interpolation.BILINEAR
    terrain: bool = False
    kml_max_lod_pixels: int = 1024
    kml_draw_order_offset: int = 0
    projection: ProjectionSettings = field(default_factory=ProjectionSettings)
    datum: DatumSettings = field(default_factory=DatumSettings)
    max_workers: int = 1

    @property
    def manual(self) -> bool:
        """Whether the input georeference is given by manual bounds."""
        return self.global_ or any(
            v is not None for v in (self.north, self.south, self.east, self.west)
        )

    @property
    def georeferenced(self) -> bool:
        """False for the single-image, no-projection pass-through run."""
        return (self.mode is not MosaicMode.NONE
                and self.projection.type is not ProjectionType.NONE)

    def validate(self) -> None:
        """Check option consistency and fill derived defaults.

        Raises
        ------
        ValidationError
            On any inconsistent or missing option.
        """
        if not self.inputs:
            raise ValidationError("Need at least one input image")

        if self.datum.type is DatumOverride.SPHERE and not self.datum.sphere_radius:
            raise ValidationError("Sphere datum override requires a radius")

        if self.tile_size <= 0:
            raise ValidationError(f"tile_size must be positive, got {self.tile_size}")
        if self.aspect_ratio < 1:
            raise ValidationError(
                f"aspect_ratio must be >= 1, got {self.aspect_ratio}"
            )
        if self.global_resolution is not None and self.global_resolution <= 0:
            raise ValidationError(
                f"global_resolution must be positive, got {self.global_resolution}"
            )
        if self.max_workers < 1:
            raise ValidationError(f"max_workers must be >= 1, got {self.max_workers}")
        if not isinstance(self.interpolation, Interpolation):
            raise ValidationError(
                f"interpolation must be an Interpolation, got {self.interpolation!r}"
            )

        if self.output_name is None:
            first = self.inputs[0]
            if isinstance(first, ImageSource):
                self.output_name = Path(first.name).stem or 'mosaic'
            else:
                self.output_name = Path(first).stem

        if self.manual:
            if len(self.inputs) != 1:
                raise ValidationError(
                    "Cannot override georeference information on multiple images"
                )
            bounds = (self.north, self.south, self.east, self.west)
            if not self.global_ and any(v is None for v in bounds):
                raise ValidationError(
                    "If you provide one, you must provide all of: "
                    "north, south, east, west"
                )
            if self.global_:
                self.north, self.south, self.east, self.west = 90.0, -90.0, 180.0, -180.0

        if not self.georeferenced and len(self.inputs) != 1:
            raise ValidationError("Non-georeferenced images cannot be composed")

        if self.mode in (MosaicMode.CELESTIA, MosaicMode.UNIVIEW) and not self.module_name:
            raise ValidationError("Uniview and Celestia require module_name")

        if self.projection.type is ProjectionType.UTM and not self.projection.utm_zone:
            raise ValidationError("UTM projection requires utm_zone")
        if (self.projection.type is ProjectionType.LAMBERT_CONFORMAL_CONIC
                and (self.projection.p1 is None or self.projection.p2 is None)):
            raise ValidationError(
                "Lambert conformal conic projection requires p1 and p2"
            )
