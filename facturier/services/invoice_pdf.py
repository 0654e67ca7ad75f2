# facturier/services/invoice_pdf.py
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Awaitable, Callable, Optional

from facturier.config import Settings
from facturier.errors import RenderError
from facturier.models import CanonicalInvoice, TemplateType
from facturier.templates import render_invoice_html

logger = logging.getLogger(__name__)


BrowserFactory = Callable[[bool], Awaitable[Any]]

PDF_FORMAT = "A4"
_CHROMIUM_ARGS = ["--no-sandbox", "--disable-dev-shm-usage"]


class PdfRenderer:
    """
    One lazily launched headless browser shared by every PDF render.

    The launch happens under a lock so concurrent first calls start a single
    browser; a semaphore caps the number of pages open at once. close() must be
    awaited at shutdown. Tests pass browser_factory to avoid a real Chromium.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        browser_factory: Optional[BrowserFactory] = None,
    ) -> None:
        self.settings = settings or Settings()
        self._browser_factory = browser_factory
        self._browser: Any = None
        self._playwright: Any = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._launch_lock = asyncio.Lock()
        self._pages = asyncio.Semaphore(self.settings.pdf_max_concurrency)
        self.launch_count = 0

    @property
    def is_running(self) -> bool:
        return self._browser is not None

    def _bind_loop(self) -> None:
        # Lock, semaphore and browser all belong to the loop that created them.
        loop = asyncio.get_running_loop()
        if loop is self._loop:
            return
        if self._loop is not None:
            logger.warning("pdf.browser.loop_changed dropping_browser=%s", self._browser is not None)
        self._loop = loop
        self._launch_lock = asyncio.Lock()
        self._pages = asyncio.Semaphore(self.settings.pdf_max_concurrency)
        self._browser = None
        self._playwright = None

    def _is_connected(self, browser: Any) -> bool:
        check = getattr(browser, "is_connected", None)
        return check() if callable(check) else True

    async def _launch(self) -> Any:
        headless = self.settings.pdf_headless
        if self._browser_factory is not None:
            return await self._browser_factory(headless)

        from playwright.async_api import async_playwright

        self._playwright = await async_playwright().start()
        try:
            return await self._playwright.chromium.launch(headless=headless, args=_CHROMIUM_ARGS)
        except Exception:
            await self._playwright.stop()
            self._playwright = None
            raise

    async def _ensure_browser(self) -> Any:
        if self._browser is not None and self._is_connected(self._browser):
            return self._browser
        async with self._launch_lock:
            if self._browser is not None and not self._is_connected(self._browser):
                logger.warning("pdf.browser.disconnected relaunching=1")
                await self._discard()
            if self._browser is None:
                logger.info("pdf.browser.launch headless=%s", self.settings.pdf_headless)
                self._browser = await self._launch()
                self.launch_count += 1
        return self._browser

    @asynccontextmanager
    async def acquire_page(self) -> AsyncIterator[Any]:
        self._bind_loop()
        async with self._pages:
            browser = await self._ensure_browser()
            page = await browser.new_page()
            try:
                yield page
            finally:
                await page.close()

    def _margins(self) -> dict[str, str]:
        margin = f"{self.settings.pdf_margin_mm}mm"
        return {"top": margin, "right": margin, "bottom": margin, "left": margin}

    async def render_pdf(self, html: str) -> bytes:
        try:
            async with self.acquire_page() as page:
                await page.set_content(html, wait_until="networkidle")
                return await page.pdf(
                    format=PDF_FORMAT,
                    print_background=True,
                    margin=self._margins(),
                )
        except Exception as exc:
            logger.exception("pdf.render.failed")
            raise RenderError(f"PDF generation failed: {exc}") from exc

    async def _discard(self) -> None:
        playwright = self._playwright
        self._browser = None
        self._playwright = None
        if playwright is not None:
            await playwright.stop()

    async def close(self) -> None:
        browser, playwright = self._browser, self._playwright
        self._browser = None
        self._playwright = None
        if browser is not None:
            await browser.close()
            logger.info("pdf.browser.closed")
        if playwright is not None:
            await playwright.stop()

    async def __aenter__(self) -> "PdfRenderer":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


async def render_pdf_template(
    renderer: PdfRenderer,
    data: CanonicalInvoice,
    template_type: Any = TemplateType.FRENCH_STANDARD,
) -> dict[str, Any]:
    variant = TemplateType.resolve(template_type)
    html = render_invoice_html(data, variant)
    try:
        pdf_bytes = await renderer.render_pdf(html)
    except RenderError as exc:
        return {"success": False, "error": "Erreur lors de la génération du PDF", "message": str(exc)}
    logger.debug("render.pdf invoice=%s template=%s bytes=%s", data.invoice.id, variant.value, len(pdf_bytes))
    return {
        "success": True,
        "data": {
            "pdfBuffer": pdf_bytes,
            "html": html,
            "metadata": {
                "format": PDF_FORMAT,
                "templateType": variant.value,
                "createdAt": datetime.now(timezone.utc).isoformat(),
            },
        },
    }
