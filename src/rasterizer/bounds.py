"""Physical page geometry extraction."""
import logging
import warnings
from typing import List

from schemas import BoundsResult, PageBounds
from schemas.errors import BoundsError, BoundsFallbackWarning

from .document import DocumentHandle

logger = logging.getLogger(__name__)


def get_page_bounds(handle: DocumentHandle, page_index: int) -> PageBounds:
    """
    Read one page's bounds, with no fallback.

    Raises:
        BoundsError: If the page cannot be loaded or its rectangle is degenerate
    """
    try:
        return PageBounds.from_tuple(handle.page_bounds(page_index))
    except Exception as e:
        raise BoundsError(page_index, str(e)) from e


def extract_bounds(handle: DocumentHandle) -> List[BoundsResult]:
    """
    Read every page's bounds, in page order.

    A page whose geometry cannot be read gets the A4 fallback and a reason,
    so one bad page never stops the rest of the document.

    Raises:
        DecodeError: If the document cannot report a page count (e.g. locked)
    """
    page_count = handle.page_count()
    results: List[BoundsResult] = []

    for page_index in range(page_count):
        try:
            bounds = PageBounds.from_tuple(handle.page_bounds(page_index))
            results.append(BoundsResult.ok(page_index, bounds))
            logger.debug(f"Page {page_index}: {bounds.width_pt} x {bounds.height_pt} pt")
        except Exception as e:
            logger.warning(f"Failed to get bounds for page {page_index}: {e}")
            results.append(BoundsResult.fallback(page_index, str(e)))

    return results


def extract_all_bounds(handle: DocumentHandle) -> List[PageBounds]:
    """
    Read every page's bounds, surfacing fallbacks as BoundsFallbackWarning.

    Args:
        handle: An unlocked document handle

    Returns:
        One PageBounds per page, in page order
    """
    results = extract_bounds(handle)
    for result in results:
        if result.is_fallback:
            warnings.warn(BoundsFallbackWarning(result.page_index, result.reason), stacklevel=2)
    return [r.bounds for r in results]
