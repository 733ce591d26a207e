"""
Mask-driven compositing of a sharp subject over a blurred copy of the same image.

All bitmaps are uint8 H x W x C (BGRA from the loader); masks are uint8 H x W.
Outputs always have the dimensions of the original.
"""
from __future__ import annotations
import numpy as np
import cv2


def blur_image(bitmap: np.ndarray, radius_px: float) -> np.ndarray:
    """Uniform gaussian blur, radius_px is the standard deviation (CSS blur() semantics)."""
    if radius_px <= 0:
        return bitmap.copy()
    return cv2.GaussianBlur(bitmap, (0, 0), sigmaX=float(radius_px), sigmaY=float(radius_px))


def fake_blur(bitmap: np.ndarray, radius_px: float) -> np.ndarray:
    """Fallback rendition with no segmentation: the whole frame is blurred."""
    return blur_image(bitmap, radius_px)


def align_mask(mask: np.ndarray, width: int, height: int, soft: bool = False) -> np.ndarray:
    """Rescale a mask to width x height. Label masks use nearest neighbour so they stay 0/1."""
    if mask.shape[:2] == (height, width):
        return mask
    interp = cv2.INTER_LINEAR if soft else cv2.INTER_NEAREST
    return cv2.resize(mask, (width, height), interpolation=interp)


def feather_alpha(keep: np.ndarray, px: int) -> np.ndarray:
    """Return uint8 alpha (0..255), feathered but strictly confined to the keep mask."""
    bin_mask = (keep > 0).astype(np.uint8) * 255
    if px <= 0:
        return bin_mask
    blurred = cv2.GaussianBlur(bin_mask, (0, 0), px)
    # hard gate: no alpha outside the binary mask
    return np.where(bin_mask > 0, blurred, 0).astype(np.uint8)


def _check_shapes(original: np.ndarray, blurred: np.ndarray, mask: np.ndarray) -> None:
    if original.shape != blurred.shape:
        raise ValueError(f"blurred shape {blurred.shape} != original shape {original.shape}")
    if mask.shape[:2] != original.shape[:2]:
        raise ValueError(f"mask shape {mask.shape[:2]} != image shape {original.shape[:2]}; align it first")


def composite_label_mask(original: np.ndarray, blurred: np.ndarray, keep: np.ndarray) -> np.ndarray:
    """
    Pixel-selector blend. Every pixel is blurred except where keep == 1;
    selected pixels take all channels (alpha included) from the blurred copy.
    """
    _check_shapes(original, blurred, keep)
    to_blur = keep != 1
    out = original.copy()
    out[to_blur] = blurred[to_blur]
    return out


def composite_soft_mask(original: np.ndarray, blurred: np.ndarray, alpha: np.ndarray) -> np.ndarray:
    """
    Soft-mask blend, the canvas sequence
      1. draw original
      2. destination-in with the mask   -> original keeps alpha * mask
      3. destination-over blurred       -> blurred drawn underneath
    i.e. Porter-Duff "masked original over blurred".
    """
    _check_shapes(original, blurred, alpha)
    a_mask = alpha.astype(np.float32) / 255.0

    if original.ndim == 3 and original.shape[2] == 4:
        c_o = original[..., :3].astype(np.float32)
        c_b = blurred[..., :3].astype(np.float32)
        a_o = original[..., 3].astype(np.float32) / 255.0 * a_mask
        a_b = blurred[..., 3].astype(np.float32) / 255.0
        a_out = a_o + a_b * (1.0 - a_o)
        num = c_o * a_o[..., None] + c_b * (a_b * (1.0 - a_o))[..., None]
        safe = np.where(a_out > 0, a_out, 1.0)
        c_out = np.where(a_out[..., None] > 0, num / safe[..., None], 0.0)
        out = np.dstack([c_out, a_out * 255.0])
    else:
        a3 = a_mask[..., None]
        out = original.astype(np.float32) * a3 + blurred.astype(np.float32) * (1.0 - a3)

    return np.clip(np.rint(out), 0, 255).astype(np.uint8)
