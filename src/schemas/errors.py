"""Error and warning taxonomy for the rasterize / enhance / export pipeline."""
from typing import Optional


class PipelineError(Exception):
    """Base class for every pipeline failure."""


class DecodeError(PipelineError):
    """The document cannot be opened or its page count cannot be read."""


class PasswordError(PipelineError):
    """Wrong or missing password. The handle stays open; retry is allowed."""


class BoundsError(PipelineError):
    def __init__(self, page_index: int, message: str):
        self.page_index = page_index
        super().__init__(f"Failed to get bounds for page {page_index}: {message}")


class RenderError(PipelineError):
    """Rasterization of one page failed. Other pages are unaffected."""

    def __init__(self, page_index: int, message: str):
        self.page_index = page_index
        super().__init__(f"Failed to render page {page_index}: {message}")


class ProcessingError(PipelineError):
    """A named enhancement stage failed; the chain produced no output."""

    def __init__(self, stage: str, message: str):
        self.stage = stage
        super().__init__(f"Enhancement stage '{stage}' failed: {message}")


class ExportError(PipelineError):
    """A page could not be placed in the output PDF. No bytes are returned."""

    def __init__(self, message: str, page_index: Optional[int] = None):
        self.page_index = page_index
        if page_index is not None:
            message = f"Failed to embed image for page {page_index}: {message}"
        super().__init__(message)


class PipelineCancelled(PipelineError):
    """The caller cancelled a multi-page run between two pages."""


class BoundsFallbackWarning(UserWarning):
    """A page's geometry could not be read; A4 was substituted."""

    def __init__(self, page_index: int, reason: str):
        self.page_index = page_index
        self.reason = reason
        super().__init__(f"Page {page_index}: bounds unreadable ({reason}), using A4 fallback")


class FeasibilityWarning(UserWarning):
    """Estimated memory exceeds the budget. Advisory only."""

    def __init__(self, estimated_mb: float, budget_mb: float, suggestions=()):
        self.estimated_mb = estimated_mb
        self.budget_mb = budget_mb
        self.suggestions = list(suggestions)
        super().__init__(
            f"Estimated memory {estimated_mb}MB exceeds budget {budget_mb}MB"
        )
