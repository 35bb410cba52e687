# -*- coding: utf-8 -*-
"""
Array Source - In-memory numpy arrays as mosaic inputs.

Wraps an array already in memory (a decoded tile, a synthetic test image, a
pre-processed product) so it can be mosaicked like a file on disk.

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
from typing import Any, Dict, Optional

# Third-party
import numpy as np

# geomosaic internal
from geomosaic.IO.base import ImageSource


class ArraySource(ImageSource):
    """Image source backed by a numpy array.

    Parameters
    ----------
    data : np.ndarray
        ``(rows, cols)`` or ``(bands, rows, cols)`` pixel array.
    geolocation : Dict[str, Any], optional
        ``{'crs': ..., 'transform': Affine(...)}`` georeference entries.
    nodata : float, optional
        Nodata value stored with the array.
    name : str, default='<array>'
        Identifier used in log and error messages.

    Raises
    ------
    TypeError
        If *data* is not a numpy ndarray.
    ValueError
        If *data* is not 2D or 3D.

    Examples
    --------
    >>> from rasterio.transform import Affine
    >>> src = ArraySource(
    ...     np.zeros((180, 360), dtype=np.uint8),
    ...     geolocation={'crs': 'EPSG:4326',
    ...                  'transform': Affine(1, 0, -180, 0, -1, 90)},
    ... )
    """

    def __init__(
        self,
        data: np.ndarray,
        geolocation: Optional[Dict[str, Any]] = None,
        nodata: Optional[float] = None,
        name: str = '<array>',
    ) -> None:
        super().__init__()
        if not isinstance(data, np.ndarray):
            raise TypeError(
                f"data must be np.ndarray, got {type(data).__name__}"
            )
        if data.ndim not in (2, 3):
            raise ValueError(f"data must be 2D or 3D, got {data.ndim}D")

        self._data = data
        self._geolocation = geolocation
        self.name = name
        self.metadata = {
            'format': 'array',
            'rows': data.shape[-2],
            'cols': data.shape[-1],
            'bands': 1 if data.ndim == 2 else data.shape[0],
            'dtype': str(data.dtype),
            'nodata': nodata,
        }

    def read_full(self) -> np.ndarray:
        return self._data

    def get_geolocation(self) -> Optional[Dict[str, Any]]:
        return self._geolocation
