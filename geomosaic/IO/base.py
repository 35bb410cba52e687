# -*- coding: utf-8 -*-
"""
IO Base Classes - Abstract interface for mosaic input rasters.

Defines the image source adapter contract consumed by the mosaic pipeline:
pixel access, dimensions, an optional stored nodata value, and optional
georeference information. Decoding lives entirely in the concrete adapters.

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

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

import numpy as np


class ImageSource(ABC):
    """
    Abstract base class for all mosaic input rasters.

    Attributes
    ----------
    name : str
        Human-readable identifier used in log and error messages.
    metadata : Dict[str, Any]
        Source metadata. Adapters populate at least ``'rows'``, ``'cols'``,
        ``'bands'`` and ``'dtype'``.

    Notes
    -----
    Arrays are band-first: ``read_full()`` returns ``(rows, cols)`` for
    single-band sources or ``(bands, rows, cols)`` for multi-band sources.
    """

    name: str = '<image>'

    def __init__(self) -> None:
        self.metadata: Dict[str, Any] = {}

    @abstractmethod
    def read_full(self) -> np.ndarray:
        """
        Read the entire image.

        Returns
        -------
        np.ndarray
            Shape ``(rows, cols)`` or ``(bands, rows, cols)``.
        """
        pass

    @property
    def nodata(self) -> Optional[float]:
        """Nodata value stored with the source, if any."""
        return self.metadata.get('nodata')

    def get_shape(self) -> Tuple[int, ...]:
        """
        Get the shape of the image.

        Returns
        -------
        Tuple[int, ...]
            ``(rows, cols)`` for single-band or ``(rows, cols, bands)`` for
            multi-band imagery.
        """
        if self.metadata['bands'] == 1:
            return (self.metadata['rows'], self.metadata['cols'])
        return (
            self.metadata['rows'],
            self.metadata['cols'],
            self.metadata['bands'],
        )

    def get_dtype(self) -> np.dtype:
        """NumPy data type of the image pixels."""
        return np.dtype(self.metadata['dtype'])

    def get_geolocation(self) -> Optional[Dict[str, Any]]:
        """
        Get georeference information for the image.

        Returns
        -------
        Optional[Dict[str, Any]]
            Dictionary with ``'crs'`` and ``'transform'`` (a rasterio
            ``Affine``) entries, or None if the source is not georeferenced.
        """
        return None

    def close(self) -> None:
        """
        Close the source and release resources.

        Default implementation does nothing. Override if the source
        maintains open file handles or other resources.
        """
        pass

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"
