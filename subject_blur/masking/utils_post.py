from __future__ import annotations
import numpy as np, cv2


def largest_component(binm: np.ndarray) -> np.ndarray:
    num, labels, stats, _ = cv2.connectedComponentsWithStats(binm, connectivity=8)
    if num <= 1:
        return binm
    largest = 1 + np.argmax(stats[1:, cv2.CC_STAT_AREA])
    return np.where(labels == largest, 255, 0).astype(np.uint8)


def fill_holes(mask: np.ndarray) -> np.ndarray:
    """Fill enclosed background holes of a 0/255 mask. Needs a background pixel at (0, 0)."""
    if mask[0, 0] != 0:
        return mask
    h, w = mask.shape
    ff = mask.copy()
    cv2.floodFill(ff, np.zeros((h+2, w+2), np.uint8), (0, 0), 128)
    holes = (ff == 0).astype(np.uint8) * 255
    return cv2.bitwise_or(mask, holes)


def to_rgb(image_bgra: np.ndarray) -> np.ndarray:
    if image_bgra.ndim == 3 and image_bgra.shape[2] == 4:
        return cv2.cvtColor(image_bgra, cv2.COLOR_BGRA2RGB)
    return cv2.cvtColor(image_bgra, cv2.COLOR_BGR2RGB)
