from __future__ import annotations
import numpy as np
import cv2

from .base import ModelLoadError, SegmentationResult, Segmenter
from .utils_post import largest_component, to_rgb
from ..schemas.config import RembgConfig
from ..utils.logging_utils import get_logger


class RembgMatteSegmenter(Segmenter):
    name = "rembg"

    def __init__(self, cfg: RembgConfig) -> None:
        self.log = get_logger("rembg")
        try:
            from rembg import new_session
            self.session = new_session(cfg.model_name)
        except Exception as e:
            self.log.error(f"❌ rembg session '{cfg.model_name}' failed: {e}")
            raise ModelLoadError("Failed to load the model") from e
        self.log.info(f"✅ rembg session ready ({cfg.model_name})")

    def segment(self, image_bgra: np.ndarray) -> SegmentationResult:
        from rembg import remove
        # rembg expects RGB
        rgba = remove(to_rgb(image_bgra), session=self.session)
        if rgba.ndim == 3 and rgba.shape[-1] == 4:
            alpha = rgba[..., 3]
        else:
            alpha = np.zeros(image_bgra.shape[:2], np.uint8)
        # keep the soft edge, drop stray blobs away from the subject
        _, binm = cv2.threshold(alpha, 0, 255, cv2.THRESH_BINARY)
        keep = largest_component(binm)
        alpha = np.where(keep > 0, alpha, 0).astype(np.uint8)
        return SegmentationResult(backend=self.name, alpha=alpha)
