from __future__ import annotations

from .base import ModelLoadError, Segmenter
from ..schemas.config import SegmentationConfig


def build_segmenter(cfg: SegmentationConfig) -> Segmenter:
    """
    Construct the configured backend. Heavy libraries are imported here, so a
    missing install surfaces as a ModelLoadError like any other load failure.
    """
    try:
        if cfg.backend == "multi_person":
            from .multi_person import MultiPersonSegmenter
            return MultiPersonSegmenter(cfg.multi_person)
        if cfg.backend == "selfie":
            from .selfie import SelfieSegmenter
            return SelfieSegmenter(cfg.selfie)
        if cfg.backend == "rembg":
            from .matting import RembgMatteSegmenter
            return RembgMatteSegmenter(cfg.rembg)
    except ImportError as e:
        raise ModelLoadError(f"Backend '{cfg.backend}' unavailable: {e}") from e
    raise ModelLoadError(f"Unknown segmentation backend '{cfg.backend}'")
