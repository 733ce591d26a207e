from __future__ import annotations
import math
from dataclasses import dataclass

@dataclass
class CompositeQC:
    same_size: bool
    fg_ssim: float
    bg_sharpness_ratio: float
    passed: bool

def evaluate(same_size: bool, fg_ssim: float, bg_sharpness_ratio: float,
             min_fg_ssim: float, max_bg_sharpness_ratio: float) -> CompositeQC:
    # NaN metrics (tiny or empty regions) do not fail the check
    passed = (
        same_size and
        (math.isnan(fg_ssim) or fg_ssim >= min_fg_ssim) and
        (math.isnan(bg_sharpness_ratio) or bg_sharpness_ratio <= max_bg_sharpness_ratio)
    )
    return CompositeQC(same_size, fg_ssim, bg_sharpness_ratio, passed)
