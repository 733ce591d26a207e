from __future__ import annotations
import numpy as np
import cv2
from skimage.metrics import structural_similarity as ssim


def _luma(bitmap: np.ndarray) -> np.ndarray:
    if bitmap.ndim == 2:
        return bitmap
    code = cv2.COLOR_BGRA2GRAY if bitmap.shape[2] == 4 else cv2.COLOR_BGR2GRAY
    return cv2.cvtColor(bitmap, code)


def foreground_ssim(original: np.ndarray, output: np.ndarray, keep: np.ndarray) -> float:
    """
    SSIM of luma over the subject pixels only; 1.0 when the subject is untouched.

    Background pixels of output are replaced by the original's inside the crop,
    so SSIM windows straddling the mask edge do not see the blurred background.
    """
    m = keep.astype(bool)
    if m.sum() < 10:
        return float("nan")
    # Crop to bbox for SSIM speed
    ys, xs = np.where(m)
    y0, y1 = ys.min(), ys.max()+1
    x0, x1 = xs.min(), xs.max()+1
    mc = m[y0:y1, x0:x1]
    a = _luma(original)[y0:y1, x0:x1]
    b = np.where(mc, _luma(output)[y0:y1, x0:x1], a)
    win = min(7, a.shape[0], a.shape[1])
    if win < 3:
        return float("nan")
    if win % 2 == 0:
        win -= 1
    _, smap = ssim(a, b, win_size=win, data_range=255, full=True)
    return float(smap[mc].mean())


def sharpness_ratio(original: np.ndarray, output: np.ndarray, keep: np.ndarray) -> float:
    """
    Variance of the Laplacian over the background, output / original.
    Below 1.0 means the background lost detail.
    """
    bg = ~keep.astype(bool)
    if bg.sum() < 10:
        return float("nan")
    lap_o = cv2.Laplacian(_luma(original).astype(np.float64), cv2.CV_64F)
    lap_r = cv2.Laplacian(_luma(output).astype(np.float64), cv2.CV_64F)
    var_o = float(lap_o[bg].var())
    if var_o <= 1e-9:
        return float("nan")
    return float(lap_r[bg].var()) / var_o
