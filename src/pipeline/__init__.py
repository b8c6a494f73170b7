"""Pipeline - caller-facing operations, sessions and whole-document runs."""

from .iterate import CancelToken, export_document, iter_processed_pages
from .operations import (
    AuthResult,
    OpenResult,
    authenticate,
    check_feasibility,
    export_pdf,
    open_and_bound,
    process_image,
    render_page,
    render_preview,
)
from .session import DocumentSession, SessionRegistry

__all__ = [
    "AuthResult",
    "OpenResult",
    "authenticate",
    "check_feasibility",
    "export_pdf",
    "open_and_bound",
    "process_image",
    "render_page",
    "render_preview",
    "CancelToken",
    "export_document",
    "iter_processed_pages",
    "DocumentSession",
    "SessionRegistry",
]
