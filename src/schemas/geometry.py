"""Physical page geometry.

Page geometry is always expressed in PDF points (1 pt = 1/72 inch) and is
independent of whatever pixel density a page is later rendered at.
"""
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

# A4 in points, substituted when a page's geometry cannot be read
A4_WIDTH_PT = 595.28
A4_HEIGHT_PT = 841.89


class PageBounds(BaseModel):
    """Physical rectangle of one page, as two corners in PDF user space."""
    model_config = ConfigDict(frozen=True)

    x0: float = Field(description="Left edge in points")
    y0: float = Field(description="Top edge in points")
    x1: float = Field(description="Right edge in points")
    y1: float = Field(description="Bottom edge in points")

    @model_validator(mode="after")
    def _check_positive_area(self) -> "PageBounds":
        if not (self.x1 - self.x0 > 0 and self.y1 - self.y0 > 0):
            raise ValueError(
                f"Page bounds must have positive width and height, got "
                f"({self.x0}, {self.y0}, {self.x1}, {self.y1})"
            )
        return self

    @property
    def width_pt(self) -> float:
        return self.x1 - self.x0

    @property
    def height_pt(self) -> float:
        return self.y1 - self.y0

    @property
    def area_pt2(self) -> float:
        return self.width_pt * self.height_pt

    @classmethod
    def from_tuple(cls, rect: Tuple[float, float, float, float]) -> "PageBounds":
        x0, y0, x1, y1 = rect
        return cls(x0=float(x0), y0=float(y0), x1=float(x1), y1=float(y1))

    @classmethod
    def a4(cls) -> "PageBounds":
        return cls(x0=0.0, y0=0.0, x1=A4_WIDTH_PT, y1=A4_HEIGHT_PT)

    def to_dict(self) -> dict:
        """Bounds plus derived sizes, for reports and CLI output."""
        return {
            "x0": self.x0,
            "y0": self.y0,
            "x1": self.x1,
            "y1": self.y1,
            "width_pt": self.width_pt,
            "height_pt": self.height_pt,
        }


class BoundsResult(BaseModel):
    """Tagged outcome of reading one page's bounds.

    ``reason`` is None when the bounds were read from the document; otherwise
    the bounds are the A4 fallback and ``reason`` says why.
    """
    model_config = ConfigDict(frozen=True)

    page_index: int = Field(ge=0, description="0-indexed page number")
    bounds: PageBounds
    reason: Optional[str] = Field(default=None, description="Why a fallback was used")

    @property
    def is_fallback(self) -> bool:
        return self.reason is not None

    @classmethod
    def ok(cls, page_index: int, bounds: PageBounds) -> "BoundsResult":
        return cls(page_index=page_index, bounds=bounds)

    @classmethod
    def fallback(cls, page_index: int, reason: str) -> "BoundsResult":
        return cls(page_index=page_index, bounds=PageBounds.a4(), reason=reason)
