"""Pipeline configuration loaded from YAML.

The package ships ``defaults.yaml``; callers may layer a user YAML file on top
of it. Only the keys present in the override file are replaced.
"""
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


class RenderSettings(BaseModel):
    default_dpi: float = Field(default=150, gt=0)
    jpeg_quality: int = Field(default=90, ge=1, le=100)
    preview_max_width: int = Field(default=400, gt=0)
    preview_max_height: int = Field(default=600, gt=0)
    preview_max_scale: float = Field(default=2.0, gt=0)
    preview_min_dpi: float = Field(default=72, gt=0)


class EstimatorSettings(BaseModel):
    memory_budget_mb: float = Field(default=500, gt=0)
    memory_overhead_factor: float = Field(default=1.5, gt=0)
    suggest_dpi_above: float = 150
    suggest_batching_above_pages: int = 50
    large_page_area_pt2: float = 500000


class ExportSettingsConfig(BaseModel):
    batch_size: int = Field(default=50, ge=1)
    page_overhead_bytes: int = Field(default=1024, ge=0)
    container_overhead_factor: float = Field(default=1.1, ge=1.0)
    max_page_dimension_pt: float = Field(default=14400, gt=0)
    creator: str = "PDF Remaster"
    producer: str = "PDF Remaster"


class PipelineSettings(BaseModel):
    render: RenderSettings = Field(default_factory=RenderSettings)
    estimator: EstimatorSettings = Field(default_factory=EstimatorSettings)
    export: ExportSettingsConfig = Field(default_factory=ExportSettingsConfig)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_yaml(path: Path) -> Dict[str, Any]:
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping, got {type(data).__name__}")
    return data


def load_settings(path: Optional[Path] = None) -> PipelineSettings:
    """
    Load pipeline settings.

    Args:
        path: Optional YAML file whose keys override the shipped defaults

    Returns:
        Validated PipelineSettings

    Raises:
        FileNotFoundError: If ``path`` is given but does not exist
        pydantic.ValidationError: If a value is out of range
    """
    data = _read_yaml(DEFAULTS_PATH)
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")
        data = _deep_merge(data, _read_yaml(path))
        logger.debug(f"Loaded settings overrides from {path}")
    return PipelineSettings.model_validate(data)


@lru_cache(maxsize=1)
def get_settings() -> PipelineSettings:
    """Shipped defaults, loaded once per process."""
    return load_settings()
