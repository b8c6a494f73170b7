"""Advisory and descriptive results returned by the estimator, exporter and codec."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Feasibility(BaseModel):
    """Memory estimate for a batch render. Advisory only."""
    model_config = ConfigDict(frozen=True)

    estimated_mb: float = Field(description="Estimated peak memory, MB, rounded to 2 decimals")
    feasible: bool
    budget_mb: float
    suggestions: List[str] = Field(default_factory=list, description="Ordered, actionable advice")


class ExportMetadata(BaseModel):
    """Document-level metadata, set once on the output PDF."""
    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    creator: Optional[str] = None
    producer: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    creation_date: Optional[datetime] = None
    modification_date: Optional[datetime] = None


class ExportSettings(BaseModel):
    """Recommended export knobs for a given purpose."""
    model_config = ConfigDict(frozen=True)

    format: str = "PDF"
    compress: bool
    batch_size: int = Field(ge=1)
    include_metadata: bool


class PageValidation(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class ImageInfo(BaseModel):
    width: int
    height: int
    channels: int
    format: str
    size: int = Field(description="Encoded size in bytes")
    has_alpha: bool
