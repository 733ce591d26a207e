from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Literal, Optional, Tuple
import numpy as np

from ..schemas.config import AppConfig, CompositeConfig
from ..utils.logging_utils import get_logger
from ..pipeline.io import ImageLoadError, load_image, save_image
from ..masking.base import SegmentationResult, Segmenter
from ..masking.factory import build_segmenter
from ..masking.selection import select_center_person
from ..compose.blend import (
    align_mask, blur_image, composite_label_mask, composite_soft_mask, fake_blur, feather_alpha,
)
from ..metrics.composite_metrics import foreground_ssim, sharpness_ratio
from ..qc.rules import CompositeQC, evaluate

MSG_MODEL = "Failed to load the model"
MSG_IMAGE = "Failed to load image"
MSG_PROCESS = "Failed to process the image"
MSG_COMPOSITE = "Failed to composite the result"
MSG_WRITE = "Failed to write the result"

Status = Literal["ready", "error", "fallback"]


@dataclass
class RenderOutcome:
    image_id: str
    status: Status
    message: str = ""
    output_path: Optional[Path] = None
    person_found: bool = False
    qc: Optional[CompositeQC] = None


def render_composite(image: np.ndarray,
                     result: SegmentationResult,
                     cfg: CompositeConfig) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """
    Blend a blurred copy of image with the original using the segmentation.

    Returns (output, keep) where keep is the uint8 0..255 foreground mask at
    image resolution. keep is None only when the label backend detected
    nobody; output is then an unmodified copy of the image. Detections whose
    masks are all empty blur the whole frame.
    """
    H, W = image.shape[:2]

    if result.is_soft:
        alpha = align_mask(result.alpha, W, H, soft=True)
        blurred = blur_image(image, cfg.blur_px)
        return composite_soft_mask(image, blurred, alpha), alpha

    if not result.persons:
        return image.copy(), None

    closest = select_center_person(result.persons, W, H)
    if closest is None:
        keep = np.zeros((H, W), np.uint8)
    else:
        keep = align_mask(closest.data, W, H)
    blurred = blur_image(image, cfg.blur_px)
    if cfg.feather_px > 0:
        alpha = feather_alpha(keep, cfg.feather_px)
        return composite_soft_mask(image, blurred, alpha), alpha
    return composite_label_mask(image, blurred, keep), (keep == 1).astype(np.uint8) * 255


def has_person(keep: Optional[np.ndarray]) -> bool:
    return keep is not None and bool((keep >= 128).any())


def _load_segmenter(cfg: AppConfig, logger) -> Optional[Segmenter]:
    logger.info(f"⏳ Loading segmentation backend '{cfg.segmentation.backend}'…")
    try:
        seg = build_segmenter(cfg.segmentation)
    except Exception as e:
        logger.error(f"❌ {MSG_MODEL}: {e}")
        return None
    logger.info("✅ Model ready")
    return seg


def _qc(image: np.ndarray, output: np.ndarray, keep: np.ndarray, cfg: AppConfig) -> CompositeQC:
    fg = keep >= 128
    return evaluate(
        output.shape == image.shape,
        foreground_ssim(image, output, fg),
        sharpness_ratio(image, output, fg),
        cfg.qc.min_fg_ssim,
        cfg.qc.max_bg_sharpness_ratio,
    )


def run_images(
    images: Iterable[Path],
    cfg: AppConfig,
    segmenter: Optional[Segmenter] = None,
) -> List[RenderOutcome]:
    """
    Render each image once: load → segment → select/align → composite → write.
    - Model load happens once; on failure every image gets the whole-frame
      fallback blur (if enabled) or an error outcome.
    - Images are independent; a failure is recorded and the run continues.
    """
    logs_dir = Path(cfg.paths.logs_dir) if cfg.paths.logs_dir else None
    logger = get_logger("orchestrator", logs_dir)
    output_dir = Path(cfg.paths.output_dir)
    masks_dir = Path(cfg.paths.masks_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    if cfg.run.save_masks:
        masks_dir.mkdir(parents=True, exist_ok=True)

    owns_segmenter = segmenter is None
    if segmenter is None:
        segmenter = _load_segmenter(cfg, logger)
    if segmenter is None and cfg.fallback.enabled:
        logger.warning(f"⚠️ Falling back to whole-image blur ({cfg.fallback.blur_px}px), no segmentation")

    outcomes: List[RenderOutcome] = []
    try:
        for i, path in enumerate(images, 1):
            path = Path(path)
            image_id = path.stem
            out_path = output_dir / f"blurred-{image_id}.png"
            logger.info("")
            logger.info(f"🚀 [{i}] Processing {path.name}")

            if segmenter is None and not cfg.fallback.enabled:
                outcomes.append(RenderOutcome(image_id, "error", MSG_MODEL))
                continue

            try:
                image = load_image(path)
            except ImageLoadError as e:
                logger.error(f" [{i}] {e}")
                outcomes.append(RenderOutcome(image_id, "error", MSG_IMAGE))
                continue

            if segmenter is None:
                try:
                    save_image(out_path, fake_blur(image, cfg.fallback.blur_px))
                except Exception as e:
                    logger.error(f" [{i}] {MSG_WRITE}: {e}")
                    outcomes.append(RenderOutcome(image_id, "error", MSG_WRITE))
                    continue
                logger.info(f" 🌫️  Fallback blur → {out_path.name}")
                outcomes.append(RenderOutcome(image_id, "fallback", MSG_MODEL, out_path))
                continue

            try:
                result = segmenter.segment(image)
            except Exception as e:
                logger.error(f" [{i}] {MSG_PROCESS}: {e}")
                outcomes.append(RenderOutcome(image_id, "error", MSG_PROCESS))
                continue

            try:
                output, keep = render_composite(image, result, cfg.composite)
                save_image(out_path, output)
            except Exception as e:
                logger.error(f" [{i}] {MSG_COMPOSITE}: {e}")
                outcomes.append(RenderOutcome(image_id, "error", MSG_COMPOSITE))
                continue

            outcome = RenderOutcome(image_id, "ready", output_path=out_path, person_found=has_person(keep))

            if keep is None:
                logger.info(" No person detected; wrote the unmodified image.")
            else:
                if cfg.run.save_masks:
                    try:
                        save_image(masks_dir / f"mask-{image_id}.png", keep)
                    except Exception as e:
                        logger.warning(f" [{i}] ⚠️ Could not save mask: {e}")
                if cfg.qc.enabled:
                    try:
                        outcome.qc = _qc(image, output, keep, cfg)
                    except Exception as e:
                        logger.warning(f" [{i}] ⚠️ QC failed: {e}")
                    else:
                        logger.info(
                            f" QC | fg_SSIM={outcome.qc.fg_ssim:.3f} "
                            f"bg_sharpness={outcome.qc.bg_sharpness_ratio:.3f} → "
                            f"{'PASS' if outcome.qc.passed else 'FAIL'}"
                        )
            logger.info(f" ✅ [{i}] {result.backend} → {out_path.name}")
            outcomes.append(outcome)
    finally:
        if owns_segmenter and segmenter is not None:
            segmenter.close()

    _log_summary(outcomes, logger)
    return outcomes


def _log_summary(outcomes: List[RenderOutcome], logger) -> None:
    if not outcomes:
        return
    logger.info("")
    logger.info("=" * 60)
    logger.info("📊 SUMMARY")
    logger.info("=" * 60)
    logger.info(f"{'image':<30} {'status':<9} {'person':<7} note")
    for o in outcomes:
        note = o.message
        if o.qc is not None:
            note = f"QC {'PASS' if o.qc.passed else 'FAIL'}"
        logger.info(f"{o.image_id[:30]:<30} {o.status:<9} {('yes' if o.person_found else 'no'):<7} {note}")
    counts = {s: sum(1 for o in outcomes if o.status == s) for s in ("ready", "fallback", "error")}
    logger.info(f"ready={counts['ready']} fallback={counts['fallback']} error={counts['error']}")
    logger.info("=" * 60)
