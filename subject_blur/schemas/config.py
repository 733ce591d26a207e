from __future__ import annotations
from pydantic import BaseModel, Field, field_validator
from typing import Literal, Optional, Union

# BodyPix-style internal resolution presets (fraction of the input size)
INTERNAL_RESOLUTIONS = {"low": 0.25, "medium": 0.5, "high": 0.75, "full": 1.0}


class MultiPersonConfig(BaseModel):
    model_name: str = "facebook/mask2former-swin-small-coco-instance"  # HuggingFace instance segmentation model
    device: Literal["cpu", "mps", "cuda"] = "cpu"
    internal_resolution: Union[Literal["low", "medium", "high", "full"], float] = "medium"
    segmentation_threshold: float = Field(0.7, ge=0.0, le=1.0)  # per-pixel person probability
    score_threshold: float = Field(0.5, ge=0.0, le=1.0)         # per-instance confidence
    max_detections: int = 10
    flip_horizontal: bool = False

    @field_validator("internal_resolution")
    @classmethod
    def _check_scale(cls, v):
        if isinstance(v, float) and not (0.0 < v <= 1.0):
            raise ValueError("internal_resolution must be in (0, 1]")
        return v

    def scale(self) -> float:
        if isinstance(self.internal_resolution, str):
            return INTERNAL_RESOLUTIONS[self.internal_resolution]
        return float(self.internal_resolution)


class SelfieConfig(BaseModel):
    model_dir: str = "models/selfie_segmentation"
    # 0 = general (square) model, 1 = landscape model
    model_selection: Literal[0, 1] = 1


class RembgConfig(BaseModel):
    model_name: str = "u2net_human_seg"


class SegmentationConfig(BaseModel):
    backend: Literal["multi_person", "selfie", "rembg"] = "multi_person"
    multi_person: MultiPersonConfig = Field(default_factory=MultiPersonConfig)
    selfie: SelfieConfig = Field(default_factory=SelfieConfig)
    rembg: RembgConfig = Field(default_factory=RembgConfig)


class CompositeConfig(BaseModel):
    blur_px: float = 10.0   # CSS blur(10px): gaussian standard deviation
    feather_px: int = 0     # 0 = hard edges on label masks


class FallbackConfig(BaseModel):
    enabled: bool = True    # model load failure -> whole-image blur
    blur_px: float = 10.0


class PathsConfig(BaseModel):
    input: str
    output_dir: str = "data/outputs"
    masks_dir: str = "data/masks"
    logs_dir: Optional[str] = "logs"


class RunConfig(BaseModel):
    limit: Optional[int] = None
    save_masks: bool = True


class QCConfig(BaseModel):
    enabled: bool = True
    min_fg_ssim: float = 0.95
    max_bg_sharpness_ratio: float = 0.9


class AppConfig(BaseModel):
    paths: PathsConfig
    run: RunConfig = Field(default_factory=RunConfig)
    segmentation: SegmentationConfig = Field(default_factory=SegmentationConfig)
    composite: CompositeConfig = Field(default_factory=CompositeConfig)
    fallback: FallbackConfig = Field(default_factory=FallbackConfig)
    qc: QCConfig = Field(default_factory=QCConfig)
