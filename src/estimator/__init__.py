"""Estimator - feasibility checks and recommendations made before a batch run."""

from .feasibility import estimate_memory, estimate_output_size, estimate_page_memory
from .recommendations import (
    recommended_dpi,
    recommended_export_settings,
    recommended_processing_params,
)

__all__ = [
    "estimate_memory",
    "estimate_output_size",
    "estimate_page_memory",
    "recommended_dpi",
    "recommended_export_settings",
    "recommended_processing_params",
]
