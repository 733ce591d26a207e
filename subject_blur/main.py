from __future__ import annotations
import argparse, yaml
from pathlib import Path
from typing import List, Optional
from subject_blur.schemas.config import AppConfig
from subject_blur.utils.logging_utils import get_logger
from subject_blur.pipeline.io import resolve_inputs
from subject_blur.pipeline.orchestrator import run_images

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Blur the background behind the main subject of a photo")
    ap.add_argument("--config", type=Path, default=Path("configs/default.yaml"))
    ap.add_argument("--input", type=Path, help="image file or directory of images")
    ap.add_argument("--output-dir", type=Path)
    ap.add_argument("--backend", choices=["multi_person", "selfie", "rembg"])
    ap.add_argument("--blur-px", type=float)
    ap.add_argument("--limit", type=int)
    return ap.parse_args(argv)

def load_config(path: Path) -> AppConfig:
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return AppConfig.model_validate(raw)

def apply_overrides(cfg: AppConfig, args: argparse.Namespace) -> AppConfig:
    if args.input:
        cfg.paths.input = str(args.input)
    if args.output_dir:
        cfg.paths.output_dir = str(args.output_dir)
    if args.backend:
        cfg.segmentation.backend = args.backend
    if args.blur_px is not None:
        cfg.composite.blur_px = args.blur_px
        cfg.fallback.blur_px = args.blur_px
    if args.limit:
        cfg.run.limit = args.limit
    return cfg

def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    cfg = apply_overrides(load_config(args.config), args)

    logs_dir = Path(cfg.paths.logs_dir) if cfg.paths.logs_dir else None
    log = get_logger("main", logs_dir)
    log.info("🚀 Starting subject-blur run")
    log.info(f"📁 input={cfg.paths.input} | output_dir={cfg.paths.output_dir} | "
             f"backend={cfg.segmentation.backend} | blur={cfg.composite.blur_px}px | limit={cfg.run.limit}")

    images = resolve_inputs(Path(cfg.paths.input), cfg.run.limit)
    if not images:
        log.error(f"❌ No images found at {cfg.paths.input}")
        raise SystemExit(1)

    outcomes = run_images(images, cfg)
    if all(o.status == "error" for o in outcomes):
        log.error("❌ Every image failed.")
        raise SystemExit(1)
    log.info("🎉 Done.")

if __name__ == "__main__":
    main()
