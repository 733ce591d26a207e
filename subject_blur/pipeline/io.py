from __future__ import annotations
from pathlib import Path
from typing import List
import numpy as np
import cv2
from PIL import Image, UnidentifiedImageError

IMAGE_SUFFIXES = (".jpg", ".jpeg", ".png", ".webp", ".bmp")
EXIF_ORIENTATION = 0x0112


class ImageLoadError(RuntimeError):
    """Raised when an input image cannot be read or decoded."""


def exif_orientation(path: Path) -> int:
    """EXIF orientation tag (1..8), 1 when absent or unreadable by Pillow."""
    try:
        with Image.open(path) as im:
            value = im.getexif().get(EXIF_ORIENTATION, 1)
    except (UnidentifiedImageError, OSError):
        return 1
    return value if value in range(1, 9) else 1


def apply_orientation(img: np.ndarray, orientation: int) -> np.ndarray:
    """Rotate/flip pixels so the bitmap is upright, as PIL.ImageOps.exif_transpose does."""
    if orientation == 2:
        return cv2.flip(img, 1)
    if orientation == 3:
        return cv2.rotate(img, cv2.ROTATE_180)
    if orientation == 4:
        return cv2.flip(img, 0)
    if orientation == 5:
        return cv2.transpose(img)
    if orientation == 6:
        return cv2.rotate(img, cv2.ROTATE_90_CLOCKWISE)
    if orientation == 7:
        return cv2.rotate(cv2.transpose(img), cv2.ROTATE_180)
    if orientation == 8:
        return cv2.rotate(img, cv2.ROTATE_90_COUNTERCLOCKWISE)
    return img


def load_image(path: Path) -> np.ndarray:
    """Read an image file as an upright BGRA uint8 bitmap (H x W x 4)."""
    path = Path(path)
    if not path.is_file():
        raise ImageLoadError(f"Failed to load image: {path} does not exist")
    # IMREAD_UNCHANGED keeps alpha but skips EXIF orientation
    img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if img is None:
        raise ImageLoadError(f"Failed to load image: cannot decode {path}")
    if img.dtype != np.uint8:
        # 16-bit PNG/TIFF -> 8-bit
        img = (img / 257.0).astype(np.uint8) if img.dtype == np.uint16 else img.astype(np.uint8)
    if img.ndim == 2:
        img = cv2.cvtColor(img, cv2.COLOR_GRAY2BGRA)
    elif img.shape[2] == 3:
        img = cv2.cvtColor(img, cv2.COLOR_BGR2BGRA)
    return np.ascontiguousarray(apply_orientation(img, exif_orientation(path)))


def save_image(path: Path, bitmap: np.ndarray) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    out = bitmap
    if path.suffix.lower() in (".jpg", ".jpeg") and bitmap.ndim == 3 and bitmap.shape[2] == 4:
        out = cv2.cvtColor(bitmap, cv2.COLOR_BGRA2BGR)
    if not cv2.imwrite(str(path), out):
        raise RuntimeError(f"Failed to write {path}")
    return path


def discover_images(input_dir: Path, limit: int | None = None) -> List[Path]:
    images = sorted(p for p in Path(input_dir).iterdir()
                    if p.is_file() and p.suffix.lower() in IMAGE_SUFFIXES)
    return images[:limit] if limit else images


def resolve_inputs(path: Path, limit: int | None = None) -> List[Path]:
    """A single image file, or every image inside a directory."""
    path = Path(path)
    if path.is_dir():
        return discover_images(path, limit)
    return [path] if path.exists() else []
