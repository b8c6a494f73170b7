"""Opaque document handle over PyMuPDF.

The rest of the pipeline only ever sees ``DocumentHandle``: the handful of
operations listed below. The PyMuPDF document object never leaks out.
"""
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Tuple

import pymupdf

from schemas import ColorMode, ImageFormat, RasterImage
from schemas.errors import DecodeError, PasswordError

logger = logging.getLogger(__name__)

Rect = Tuple[float, float, float, float]


class DocumentHandle(ABC):
    """Capability interface for a decoded, possibly encrypted document.

    A handle is owned by one processing session at a time; implementations
    are not required to be reentrant.
    """

    @property
    @abstractmethod
    def needs_password(self) -> bool:
        """True if the document was encrypted when opened."""

    @property
    @abstractmethod
    def is_locked(self) -> bool:
        """True while a password is still required to read pages."""

    @abstractmethod
    def authenticate(self, password: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def page_count(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def page_bounds(self, page_index: int) -> Rect:
        raise NotImplementedError

    @abstractmethod
    def render_page_to_bitmap(
        self,
        page_index: int,
        scale_x: float,
        scale_y: float,
        color_mode: ColorMode,
    ) -> RasterImage:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self) -> "DocumentHandle":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class PyMuPDFDocument(DocumentHandle):
    """DocumentHandle backed by a ``pymupdf.Document``."""

    def __init__(self, doc: "pymupdf.Document", filename: str = "document.pdf"):
        self._doc = doc
        self.filename = filename
        self._needs_password = bool(doc.needs_pass)

    @property
    def needs_password(self) -> bool:
        return self._needs_password

    @property
    def is_locked(self) -> bool:
        return bool(self._doc.is_encrypted)

    def authenticate(self, password: str) -> bool:
        # A failed attempt leaves the document open and still locked
        result = self._doc.authenticate(password)
        return bool(result) and not self._doc.is_encrypted

    def page_count(self) -> int:
        if self.is_locked:
            raise DecodeError(f"{self.filename} is password-locked; page count unavailable")
        try:
            return self._doc.page_count
        except Exception as e:
            raise DecodeError(f"Failed to read page count of {self.filename}: {e}") from e

    def _load_page(self, page_index: int):
        if self.is_locked:
            raise PasswordError(f"{self.filename} requires a password")
        count = self._doc.page_count
        if page_index < 0 or page_index >= count:
            raise IndexError(f"Page {page_index} out of range (document has {count} pages)")
        return self._doc.load_page(page_index)

    def page_bounds(self, page_index: int) -> Rect:
        rect = self._load_page(page_index).rect
        return (rect.x0, rect.y0, rect.x1, rect.y1)

    def render_page_to_bitmap(
        self,
        page_index: int,
        scale_x: float,
        scale_y: float,
        color_mode: ColorMode,
    ) -> RasterImage:
        page = self._load_page(page_index)
        colorspace = pymupdf.csGRAY if color_mode == ColorMode.GRAY else pymupdf.csRGB

        # alpha=False renders onto an opaque white background
        pix = page.get_pixmap(
            matrix=pymupdf.Matrix(scale_x, scale_y),
            colorspace=colorspace,
            alpha=False,
            annots=True,
        )
        return RasterImage(
            data=pix.tobytes("png"),
            width=pix.width,
            height=pix.height,
            channels=pix.n,
            format=ImageFormat.PNG,
        )

    def close(self) -> None:
        if not self._doc.is_closed:
            self._doc.close()
            logger.debug(f"Closed document {self.filename}")


def open_document(data: bytes, filename: str = "document.pdf") -> PyMuPDFDocument:
    """
    Decode document bytes.

    Encrypted documents open successfully; check ``needs_password`` and call
    ``authenticate`` before reading pages.

    Args:
        data: Raw document bytes
        filename: Original file name, used for type detection and messages

    Returns:
        An open PyMuPDFDocument

    Raises:
        DecodeError: If the bytes are empty or not a readable document
    """
    if not data:
        raise DecodeError(f"{filename} is empty")

    filetype = Path(filename).suffix.lstrip(".").lower() or "pdf"
    try:
        doc = pymupdf.open(stream=data, filetype=filetype)
    except Exception as e:
        raise DecodeError(f"Failed to open {filename}: {e}") from e

    handle = PyMuPDFDocument(doc, filename)
    logger.info(f"Opened {filename} (needs password: {handle.needs_password})")
    return handle
