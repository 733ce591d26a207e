from __future__ import annotations
import numpy as np
import cv2
import torch
from PIL import Image
from typing import List

from .base import ModelLoadError, PersonSegmentation, SegmentationResult, Segmenter
from .utils_post import fill_holes, to_rgb
from ..schemas.config import MultiPersonConfig
from ..utils.logging_utils import get_logger


def _pick_device(requested: str, log) -> torch.device:
    if requested == "mps" and torch.backends.mps.is_available():
        return torch.device("mps")
    if requested == "cuda" and torch.cuda.is_available():
        return torch.device("cuda")
    if requested != "cpu":
        log.info(f"⚠️ {requested} not available, falling back to CPU")
    return torch.device("cpu")


class MultiPersonSegmenter(Segmenter):
    """
    Instance segmentation of every person in the image (HuggingFace Mask2Former,
    COCO instance checkpoint). One label mask per person, at internal resolution.

    Compatible with Mac M-series (MPS), CPU, and CUDA.
    """
    name = "multi_person"

    def __init__(self, cfg: MultiPersonConfig) -> None:
        self.log = get_logger("MultiPerson")
        self.cfg = cfg
        self.scale = cfg.scale()

        try:
            from transformers import AutoImageProcessor, AutoModelForUniversalSegmentation

            self.log.info(f"🔄 Loading instance segmentation model: {cfg.model_name}")
            self.device = _pick_device(cfg.device, self.log)
            self.processor = AutoImageProcessor.from_pretrained(cfg.model_name)
            self.model = AutoModelForUniversalSegmentation.from_pretrained(cfg.model_name)
            self.model.to(self.device)
            self.model.eval()
        except Exception as e:
            self.log.error(f"❌ Failed to load {cfg.model_name}: {e}")
            raise ModelLoadError("Failed to load the model") from e

        label2id = {k.lower(): v for k, v in (self.model.config.label2id or {}).items()}
        if "person" not in label2id:
            raise ModelLoadError(f"Model {cfg.model_name} has no 'person' class")
        self.person_id = int(label2id["person"])
        self.log.info(f"✅ Model loaded on {self.device} | internal_resolution={cfg.internal_resolution} "
                      f"| segmentation_threshold={cfg.segmentation_threshold}")

    def _internal_size(self, h: int, w: int) -> tuple[int, int]:
        return max(1, int(round(h * self.scale))), max(1, int(round(w * self.scale)))

    def segment(self, image_bgra: np.ndarray) -> SegmentationResult:
        H, W = image_bgra.shape[:2]
        ih, iw = self._internal_size(H, W)

        rgb = to_rgb(image_bgra)
        if (ih, iw) != (H, W):
            rgb = cv2.resize(rgb, (iw, ih), interpolation=cv2.INTER_AREA)

        inputs = self.processor(images=Image.fromarray(rgb), return_tensors="pt")
        inputs = {k: v.to(self.device) for k, v in inputs.items()}
        with torch.no_grad():
            outputs = self.model(**inputs)

        result = self.processor.post_process_instance_segmentation(
            outputs,
            threshold=self.cfg.score_threshold,
            mask_threshold=self.cfg.segmentation_threshold,
            target_sizes=[(ih, iw)],
        )[0]
        seg_map = result["segmentation"].cpu().numpy()

        persons: List[PersonSegmentation] = []
        infos = [s for s in result["segments_info"] if int(s["label_id"]) == self.person_id]
        infos.sort(key=lambda s: float(s["score"]), reverse=True)
        for info in infos[: self.cfg.max_detections]:
            m = (seg_map == info["id"]).astype(np.uint8) * 255
            m = fill_holes(m)
            data = (m > 0).astype(np.uint8)
            if self.cfg.flip_horizontal:
                data = np.ascontiguousarray(data[:, ::-1])
            persons.append(PersonSegmentation(data=data, score=float(info["score"])))

        self.log.info(f"🧍 {len(persons)} person(s) detected at {iw}x{ih}")
        return SegmentationResult(backend=self.name, persons=persons)
