# -*- coding: utf-8 -*-
"""
GeoTIFF Source - Read GeoTIFF rasters as mosaic inputs using rasterio.

Provides ``GeoTIFFSource``, the image source adapter for GeoTIFF and
Cloud-Optimized GeoTIFF files, exposing the stored nodata value and the
affine georeference consumed by ``AffineGeoReference.from_source``.

Dependencies
------------
rasterio

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
from pathlib import Path
from typing import Any, Dict, Optional, Union

# Third-party
import numpy as np

try:
    import rasterio
    from rasterio.errors import RasterioIOError
    _HAS_RASTERIO = True
except ImportError:
    _HAS_RASTERIO = False

# geomosaic internal
from geomosaic.exceptions import DependencyError
from geomosaic.IO.base import ImageSource


class GeoTIFFSource(ImageSource):
    """Read GeoTIFF imagery for mosaicking.

    Parameters
    ----------
    filepath : str or Path
        Path to the GeoTIFF file.

    Attributes
    ----------
    filepath : Path
        Path to the image file.
    dataset : rasterio.DatasetReader
        Rasterio dataset object for direct access.

    Raises
    ------
    DependencyError
        If rasterio is not installed.
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file cannot be opened as a GeoTIFF.

    Examples
    --------
    >>> with GeoTIFFSource('tile.tif') as src:
    ...     print(src.nodata, src.get_shape())
    """

    def __init__(self, filepath: Union[str, Path]) -> None:
        if not _HAS_RASTERIO:
            raise DependencyError(
                "rasterio is required for GeoTIFF reading. "
                "Install with: pip install rasterio"
            )
        super().__init__()
        self.filepath = Path(filepath)
        if not self.filepath.exists():
            raise FileNotFoundError(f"File not found: {self.filepath}")
        self.name = self.filepath.name
        self._load_metadata()

    def _load_metadata(self) -> None:
        """Load GeoTIFF metadata using rasterio."""
        try:
            self.dataset = rasterio.open(str(self.filepath))
        except RasterioIOError as e:
            raise ValueError(f"Failed to open GeoTIFF {self.filepath}: {e}") from e

        self.metadata = {
            'format': 'GeoTIFF',
            'rows': self.dataset.height,
            'cols': self.dataset.width,
            'bands': self.dataset.count,
            'dtype': str(self.dataset.dtypes[0]),
            'crs': str(self.dataset.crs) if self.dataset.crs else None,
            'transform': self.dataset.transform,
            'nodata': self.dataset.nodata,
        }

    def read_full(self) -> np.ndarray:
        """Read every band of the GeoTIFF.

        Returns
        -------
        np.ndarray
            ``(rows, cols)`` for single band, ``(bands, rows, cols)``
            otherwise.
        """
        data = self.dataset.read()
        if data.shape[0] == 1:
            return data[0]
        return data

    def get_geolocation(self) -> Optional[Dict[str, Any]]:
        """CRS and affine transform, or None for an ungeoreferenced file."""
        if self.metadata['crs'] is None:
            return None
        return {
            'crs': self.metadata['crs'],
            'transform': self.metadata['transform'],
        }

    def close(self) -> None:
        """Close the rasterio dataset."""
        if getattr(self, 'dataset', None) is not None:
            self.dataset.close()
