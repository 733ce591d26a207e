from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional
import numpy as np


class ModelLoadError(RuntimeError):
    """Raised by a segmenter when its model cannot be loaded."""


@dataclass
class PersonSegmentation:
    """One detected person. data is uint8 HxW, 1 = person pixel, 0 = background."""
    data: np.ndarray
    score: float = 1.0

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def width(self) -> int:
        return int(self.data.shape[1])


@dataclass
class SegmentationResult:
    backend: str
    persons: List[PersonSegmentation] = field(default_factory=list)
    alpha: Optional[np.ndarray] = None  # soft mask, uint8 0..255

    @property
    def is_soft(self) -> bool:
        return self.alpha is not None


class Segmenter(ABC):
    name: str = "segmenter"

    @abstractmethod
    def segment(self, image_bgra: np.ndarray) -> SegmentationResult:
        """Return per-person label masks or a soft alpha mask for the image."""
        raise NotImplementedError

    def close(self) -> None:
        """Release model resources. No-op by default."""
