from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from fakes import FakeBrowser, browser_factory  # noqa: E402

from facturier.config import Settings  # noqa: E402
from facturier.errors import RenderError  # noqa: E402
from facturier.services.invoice_pdf import PdfRenderer, render_pdf_template  # noqa: E402
from facturier.standardizer import get_sample_data, standardize_invoice_data  # noqa: E402


def _sample():
    sample = get_sample_data()
    return standardize_invoice_data(sample["invoice"], sample["company"], sample["client"])


def test_render_pdf_template_returns_a4_buffer() -> None:
    browser = FakeBrowser()
    renderer = PdfRenderer(Settings(), browser_factory=browser_factory(browser))

    async def run():
        try:
            return await render_pdf_template(renderer, _sample(), "tva-exempt")
        finally:
            await renderer.close()

    result = asyncio.run(run())
    assert result["success"] is True
    assert len(result["data"]["pdfBuffer"]) > 0
    assert result["data"]["metadata"]["format"] == "A4"
    assert result["data"]["metadata"]["templateType"] == "tva-exempt"
    assert "TVA: Exonéré" in result["data"]["html"]

    options = browser.pdf_calls[0]
    assert options["format"] == "A4"
    assert options["print_background"] is True
    assert options["margin"] == {"top": "20mm", "right": "20mm", "bottom": "20mm", "left": "20mm"}
    assert all(page.closed for page in browser.pages)
    assert browser.closed


def test_browser_is_launched_once_and_pages_are_bounded() -> None:
    browser = FakeBrowser(delay=0.01)
    factory = browser_factory(browser)
    renderer = PdfRenderer(Settings(pdf_max_concurrency=2, pdf_headless=False), browser_factory=factory)

    async def run():
        try:
            return await asyncio.gather(*(renderer.render_pdf(f"<p>{i}</p>") for i in range(6)))
        finally:
            await renderer.close()

    buffers = asyncio.run(run())
    assert len(buffers) == 6
    assert factory.launches == [False]
    assert renderer.launch_count == 1
    assert browser.max_open_pages <= 2
    assert browser.open_pages == 0


def test_margin_comes_from_settings() -> None:
    browser = FakeBrowser()
    renderer = PdfRenderer(Settings(pdf_margin_mm=15), browser_factory=browser_factory(browser))
    asyncio.run(renderer.render_pdf("<p>x</p>"))
    assert browser.pdf_calls[0]["margin"]["left"] == "15mm"


def test_close_allows_relaunch() -> None:
    browser = FakeBrowser()
    factory = browser_factory(browser)
    renderer = PdfRenderer(Settings(), browser_factory=factory)

    async def run():
        await renderer.render_pdf("<p>1</p>")
        await renderer.close()
        assert not renderer.is_running
        await renderer.render_pdf("<p>2</p>")
        assert renderer.is_running
        await renderer.close()

    asyncio.run(run())
    assert len(factory.launches) == 2


def test_page_failure_raises_render_error() -> None:
    browser = FakeBrowser(fail_with=RuntimeError("Target closed"))
    renderer = PdfRenderer(Settings(), browser_factory=browser_factory(browser))

    with pytest.raises(RenderError, match="Target closed"):
        asyncio.run(renderer.render_pdf("<p>x</p>"))
    assert browser.pages[0].closed


def test_async_context_manager_closes_browser() -> None:
    browser = FakeBrowser()

    async def run():
        async with PdfRenderer(Settings(), browser_factory=browser_factory(browser)) as renderer:
            await renderer.render_pdf("<p>x</p>")

    asyncio.run(run())
    assert browser.closed


def test_render_pdf_template_failure_envelope() -> None:
    browser = FakeBrowser(fail_with=RuntimeError("Target closed"))
    renderer = PdfRenderer(Settings(), browser_factory=browser_factory(browser))

    result = asyncio.run(render_pdf_template(renderer, _sample()))
    assert result["success"] is False
    assert "Target closed" in result["message"]
    assert "data" not in result


def test_disconnected_browser_is_relaunched() -> None:
    browsers: list[FakeBrowser] = []

    async def factory(headless: bool) -> FakeBrowser:
        browsers.append(FakeBrowser())
        return browsers[-1]

    renderer = PdfRenderer(Settings(), browser_factory=factory)

    async def run():
        await renderer.render_pdf("<p>1</p>")
        browsers[0].connected = False
        await renderer.render_pdf("<p>2</p>")
        await renderer.close()

    asyncio.run(run())
    assert len(browsers) == 2
    assert renderer.launch_count == 2
    assert len(browsers[0].pdf_calls) == 1
    assert len(browsers[1].pdf_calls) == 1


def test_renderer_survives_a_new_event_loop() -> None:
    browser = FakeBrowser()
    factory = browser_factory(browser)
    renderer = PdfRenderer(Settings(pdf_max_concurrency=1), browser_factory=factory)

    first = asyncio.run(renderer.render_pdf("<p>1</p>"))
    second = asyncio.run(renderer.render_pdf("<p>2</p>"))

    assert first.startswith(b"%PDF")
    assert second.startswith(b"%PDF")
    assert len(factory.launches) == 2
