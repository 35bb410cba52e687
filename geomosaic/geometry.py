# -*- coding: utf-8 -*-
"""
Geometry - Integer pixel-space bounding boxes.

Provides ``BBox``, the rectangle type used for placement boxes, canvas
extents, and aligned tile boxes. Coordinates follow the ``(x, y)`` =
``(col, row)`` convention used by the mosaic pipeline, with the maximum
corner exclusive so a box can be used directly for numpy slicing::

    chip = image[:, box.min_y:box.max_y, box.min_x:box.max_x]

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
from typing import Iterable, NamedTuple, Optional


class BBox(NamedTuple):
    """Axis-aligned integer box in pixel space.

    Attributes
    ----------
    min_x : int
        First column (inclusive).
    min_y : int
        First row (inclusive).
    max_x : int
        Last column (exclusive).
    max_y : int
        Last row (exclusive).

    Examples
    --------
    >>> box = BBox.from_size(10, 10, 300, 200)
    >>> box.width, box.height
    (300, 200)
    >>> box.contains(BBox(20, 20, 40, 40))
    True
    """

    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @classmethod
    def from_size(cls, x: int, y: int, width: int, height: int) -> 'BBox':
        """Build a box from its minimum corner and dimensions."""
        return cls(int(x), int(y), int(x) + int(width), int(y) + int(height))

    @classmethod
    def empty(cls) -> 'BBox':
        """The empty box, identity element of ``union``."""
        return cls(0, 0, 0, 0)

    @property
    def width(self) -> int:
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        return self.max_y - self.min_y

    @property
    def is_empty(self) -> bool:
        """True when the box has no positive area."""
        return self.width <= 0 or self.height <= 0

    def contains(self, other: 'BBox') -> bool:
        """Whether ``other`` lies entirely inside this box."""
        return (
            self.min_x <= other.min_x and self.min_y <= other.min_y
            and other.max_x <= self.max_x and other.max_y <= self.max_y
        )

    def intersect(self, other: 'BBox') -> 'BBox':
        """Crop this box to ``other``.

        Returns
        -------
        BBox
            The overlap, or ``BBox.empty()`` when the boxes are disjoint.
        """
        box = BBox(
            max(self.min_x, other.min_x), max(self.min_y, other.min_y),
            min(self.max_x, other.max_x), min(self.max_y, other.max_y),
        )
        if box.is_empty:
            return BBox.empty()
        return box

    def union(self, other: 'BBox') -> 'BBox':
        """Smallest box covering both boxes. Empty boxes are ignored."""
        if self.is_empty:
            return other
        if other.is_empty:
            return self
        return BBox(
            min(self.min_x, other.min_x), min(self.min_y, other.min_y),
            max(self.max_x, other.max_x), max(self.max_y, other.max_y),
        )

    def translate(self, dx: int, dy: int) -> 'BBox':
        return BBox(self.min_x + dx, self.min_y + dy,
                    self.max_x + dx, self.max_y + dy)

    def __repr__(self) -> str:
        return (
            f"BBox(({self.min_x}, {self.min_y}) -> "
            f"({self.max_x}, {self.max_y}), {self.width}x{self.height})"
        )


def union_all(boxes: Iterable[BBox]) -> BBox:
    """Union of any number of boxes (empty when none are given)."""
    result: Optional[BBox] = None
    for box in boxes:
        result = box if result is None else result.union(box)
    return BBox.empty() if result is None else result
