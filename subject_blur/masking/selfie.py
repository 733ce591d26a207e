from __future__ import annotations
from pathlib import Path
import numpy as np
import mediapipe as mp
from mediapipe.tasks import python as mp_python
from mediapipe.tasks.python import vision

from .base import ModelLoadError, SegmentationResult, Segmenter
from .utils_post import to_rgb
from ..schemas.config import SelfieConfig
from ..utils.logging_utils import get_logger

# model_selection -> file inside model_dir
SELFIE_MODELS = {
    0: "selfie_segmenter.tflite",            # general, 256x256
    1: "selfie_segmenter_landscape.tflite",  # landscape, 144x256
}


def locate_model(model_dir: str | Path, model_selection: int) -> Path:
    return Path(model_dir) / SELFIE_MODELS[model_selection]


class SelfieSegmenter(Segmenter):
    """MediaPipe selfie segmentation. Produces a soft person mask at image resolution."""
    name = "selfie"

    def __init__(self, cfg: SelfieConfig) -> None:
        self.log = get_logger("Selfie")
        model_path = locate_model(cfg.model_dir, cfg.model_selection)
        if not model_path.is_file():
            self.log.error(f"❌ Selfie segmentation model not found at {model_path}")
            raise ModelLoadError("Failed to load MediaPipe SelfieSegmentation model")
        try:
            options = vision.ImageSegmenterOptions(
                base_options=mp_python.BaseOptions(model_asset_path=str(model_path)),
                running_mode=vision.RunningMode.IMAGE,
                output_confidence_masks=True,
                output_category_mask=False,
            )
            self.segmenter = vision.ImageSegmenter.create_from_options(options)
        except Exception as e:
            self.log.error(f"❌ Error loading MediaPipe SelfieSegmentation: {e}")
            raise ModelLoadError("Failed to load MediaPipe SelfieSegmentation model") from e
        self.log.info(f"✅ Selfie segmentation ready ({model_path.name})")

    def segment(self, image_bgra: np.ndarray) -> SegmentationResult:
        rgb = np.ascontiguousarray(to_rgb(image_bgra))
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)
        result = self.segmenter.segment(mp_image)
        # single-class model: the last confidence mask is the person
        conf = result.confidence_masks[-1].numpy_view()
        if conf.ndim == 3:
            conf = conf[..., 0]
        alpha = np.clip(np.rint(conf * 255.0), 0, 255).astype(np.uint8)
        return SegmentationResult(backend=self.name, alpha=alpha)

    def close(self) -> None:
        self.segmenter.close()
