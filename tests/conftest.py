from __future__ import annotations
from pathlib import Path
from typing import Callable, Optional

import cv2
import numpy as np
import pytest

from subject_blur.masking.base import SegmentationResult, Segmenter
from subject_blur.schemas.config import AppConfig, PathsConfig

H, W = 40, 60


def checkerboard(h: int = H, w: int = W, cell: int = 2) -> np.ndarray:
    """BGR high-frequency test pattern; blurring it changes almost every pixel."""
    yy, xx = np.indices((h, w))
    board = (((yy // cell) + (xx // cell)) % 2 * 255).astype(np.uint8)
    return np.dstack([board, 255 - board, board])


class FakeSegmenter(Segmenter):
    name = "fake"

    def __init__(self, fn: Callable[[np.ndarray], SegmentationResult]):
        self.fn = fn
        self.calls = 0
        self.closed = False

    def segment(self, image_bgra: np.ndarray) -> SegmentationResult:
        self.calls += 1
        return self.fn(image_bgra)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def image_path(tmp_path: Path) -> Path:
    p = tmp_path / "in" / "portrait.png"
    p.parent.mkdir(parents=True)
    cv2.imwrite(str(p), checkerboard())
    return p


@pytest.fixture
def make_cfg(tmp_path: Path) -> Callable[..., AppConfig]:
    def _make(input_path: Optional[Path] = None, **sections) -> AppConfig:
        cfg = AppConfig(paths=PathsConfig(
            input=str(input_path or tmp_path / "in"),
            output_dir=str(tmp_path / "out"),
            masks_dir=str(tmp_path / "masks"),
            logs_dir=None,
        ))
        for name, values in sections.items():
            section = getattr(cfg, name)
            for k, v in values.items():
                setattr(section, k, v)
        return cfg
    return _make
