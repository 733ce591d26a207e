from __future__ import annotations
import math
from typing import Optional, Sequence, Tuple
import numpy as np

from .base import PersonSegmentation


def mask_centroid(seg: PersonSegmentation) -> Optional[Tuple[float, float]]:
    """Mean (x, y) of the person pixels in mask coordinates, None if the mask is empty."""
    ys, xs = np.nonzero(seg.data == 1)
    if xs.size == 0:
        return None
    return float(xs.mean()), float(ys.mean())


def select_center_person(persons: Sequence[PersonSegmentation],
                         width: int,
                         height: int) -> Optional[PersonSegmentation]:
    """
    Pick the person whose mask centroid is nearest the image centre.

    Centroids are scaled from mask resolution to image resolution before the
    distance is taken. Empty masks are skipped; ties keep the earlier person.
    """
    cx, cy = width / 2.0, height / 2.0
    closest: Optional[PersonSegmentation] = None
    min_dist = math.inf

    for seg in persons:
        c = mask_centroid(seg)
        if c is None:
            continue
        x = c[0] * (width / seg.width)
        y = c[1] * (height / seg.height)
        dist = math.hypot(x - cx, y - cy)
        if dist < min_dist:
            min_dist = dist
            closest = seg
    return closest
