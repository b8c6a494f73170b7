"""Render options and enhancement parameters."""
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .enums import ColorMode, ImageFormat

# PDF points per inch
POINTS_PER_INCH = 72.0

RGBColor = Tuple[int, int, int]


class RenderOptions(BaseModel):
    """How to rasterize a page. DPI controls pixel density, never page size."""
    model_config = ConfigDict(frozen=True)

    dpi: float = Field(default=150, gt=0, description="Pixels per inch (recommended 72-300)")
    color_mode: ColorMode = Field(default=ColorMode.RGB)
    format: ImageFormat = Field(default=ImageFormat.PNG)
    quality: Optional[int] = Field(default=None, ge=1, le=100, description="JPEG quality")

    @property
    def scale(self) -> float:
        """Uniform scale factor applied to both axes."""
        return self.dpi / POINTS_PER_INCH

    @property
    def channels(self) -> int:
        return 1 if self.color_mode == ColorMode.GRAY else 3


class SharpenParams(BaseModel):
    """Unsharp-mask knobs. sigma <= 0 disables sharpening."""
    model_config = ConfigDict(frozen=True)

    sigma: float = 0.0
    flat: float = 1.0
    jagged: float = 2.0


class ColorReplaceParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    target_color: RGBColor = (255, 255, 255)
    replace_color: RGBColor = (255, 255, 255)
    tolerance: float = 0.0


class ProcessingParams(BaseModel):
    """Enhancement chain knobs.

    Values are not range-checked here; out-of-range values are clamped by
    ``enhancement.validate_and_correct_params``.

    The defaults form the no-op configuration.
    """
    model_config = ConfigDict(frozen=True)

    grayscale: bool = False
    contrast: float = Field(default=1.0, description="Linear multiplier [0.1, 3.0]")
    brightness: float = Field(default=0.0, description="Linear offset [-100, 100]")
    threshold: float = Field(default=0.0, description="Binarization level [0, 255]; 0 disables")
    sharpen: SharpenParams = Field(default_factory=SharpenParams)
    denoise: bool = False
    gamma: float = Field(default=1.0, description="Gamma correction [0.1, 3.0]")
    color_replace: ColorReplaceParams = Field(default_factory=ColorReplaceParams)

    def is_noop(self) -> bool:
        """True when every stage of the chain would be skipped."""
        return (
            self.gamma == 1.0
            and not self.grayscale
            and self.contrast == 1.0
            and self.brightness == 0
            and not self.denoise
            and self.sharpen.sigma <= 0
            and self.threshold == 0
            and not self.color_replace.enabled
        )
