"""Tests for lazy page iteration, cancellation and whole-document export."""
import threading

import pymupdf
import pytest

from pipeline import export_document, iter_processed_pages, open_and_bound
from schemas import ExportMetadata, ProcessingParams, RenderOptions
from schemas.errors import PipelineCancelled
from telemetry import Telemetry


@pytest.fixture
def opened(mixed_pdf):
    result = open_and_bound(mixed_pdf, "mixed.pdf")
    yield result.handle, result.bounds
    result.handle.close()


class TestIterProcessedPages:
    def test_lazy_and_ordered(self, opened):
        handle, bounds = opened
        gen = iter_processed_pages(handle, bounds, RenderOptions(dpi=36))
        first = next(gen)
        assert first.page_index == 0
        assert [p.page_index for p in gen] == [1, 2]

    def test_noop_params_skip_enhancement(self, opened):
        handle, bounds = opened
        pages = list(iter_processed_pages(handle, bounds, RenderOptions(dpi=36), ProcessingParams()))
        assert all(p.processed_image is None for p in pages)
        assert all(p.processing_params is None for p in pages)

    def test_enhancement_applied(self, opened):
        handle, bounds = opened
        params = ProcessingParams(grayscale=True)
        pages = list(iter_processed_pages(handle, bounds, RenderOptions(dpi=36), params, page_indices=[2]))
        assert len(pages) == 1
        assert pages[0].page_index == 2
        assert pages[0].bounds == bounds[2]
        assert pages[0].processed_image.channels == 1
        assert pages[0].processing_params == params

    def test_progress(self, opened):
        handle, bounds = opened
        progress = []
        list(iter_processed_pages(
            handle, bounds, RenderOptions(dpi=36),
            on_progress=lambda done, total: progress.append((done, total)),
        ))
        assert progress == [(1, 3), (2, 3), (3, 3)]

    def test_cancel_between_pages(self, opened):
        handle, bounds = opened
        cancel = threading.Event()
        gen = iter_processed_pages(handle, bounds, RenderOptions(dpi=36), cancel=cancel)
        next(gen)
        cancel.set()
        with pytest.raises(PipelineCancelled):
            next(gen)

    def test_telemetry_spans(self, opened):
        handle, bounds = opened
        tel = Telemetry()
        list(iter_processed_pages(
            handle, bounds, RenderOptions(dpi=36), ProcessingParams(contrast=1.2), telemetry=tel,
        ))
        totals = tel.totals()
        assert totals["render"].count == 3
        assert totals["enhance"].count == 3


class TestExportDocument:
    def test_sizes_preserved(self, opened):
        handle, bounds = opened
        pdf = export_document(handle, bounds, RenderOptions(dpi=50), ProcessingParams(contrast=1.2))
        with pymupdf.open(stream=pdf, filetype="pdf") as doc:
            sizes = [(p.rect.width, p.rect.height) for p in doc]
        assert len(sizes) == 3
        for (w, h), b in zip(sizes, bounds):
            assert w == pytest.approx(b.width_pt, abs=1e-3)
            assert h == pytest.approx(b.height_pt, abs=1e-3)

    def test_chunked_export_merges(self, opened):
        handle, bounds = opened
        tel = Telemetry()
        pdf = export_document(
            handle, bounds, RenderOptions(dpi=36),
            metadata=ExportMetadata(title="Chunked"),
            batch_size=1,
            telemetry=tel,
        )
        with pymupdf.open(stream=pdf, filetype="pdf") as doc:
            assert doc.page_count == 3
            assert doc.metadata["title"] == "Chunked"
            assert doc[2].rect.width == pytest.approx(bounds[2].width_pt, abs=1e-3)
        assert "export/merge" in tel.totals()

    def test_cancelled_before_start(self, opened):
        handle, bounds = opened
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(PipelineCancelled):
            export_document(handle, bounds, RenderOptions(dpi=36), cancel=cancel)

    def test_cancel_mid_run_discards_output(self, opened):
        handle, bounds = opened
        cancel = threading.Event()

        def on_progress(done, total):
            if done == 1:
                cancel.set()

        with pytest.raises(PipelineCancelled):
            export_document(handle, bounds, RenderOptions(dpi=36), cancel=cancel, on_progress=on_progress)
