from __future__ import annotations

import asyncio


class FakePage:
    def __init__(self, browser: "FakeBrowser") -> None:
        self.browser = browser
        self.html = ""
        self.closed = False

    async def set_content(self, html: str, wait_until: str | None = None) -> None:
        self.html = html
        await asyncio.sleep(self.browser.delay)

    async def pdf(self, **options) -> bytes:
        if self.browser.fail_with is not None:
            raise self.browser.fail_with
        self.browser.pdf_calls.append(options)
        return b"%PDF-1.4 " + self.html.encode("utf-8")[:64]

    async def close(self) -> None:
        self.closed = True
        self.browser.open_pages -= 1


class FakeBrowser:
    def __init__(self, delay: float = 0.0, fail_with: Exception | None = None) -> None:
        self.delay = delay
        self.fail_with = fail_with
        self.pdf_calls: list[dict] = []
        self.pages: list[FakePage] = []
        self.open_pages = 0
        self.max_open_pages = 0
        self.closed = False
        self.connected = True

    def is_connected(self) -> bool:
        return self.connected

    async def new_page(self) -> FakePage:
        page = FakePage(self)
        self.pages.append(page)
        self.open_pages += 1
        self.max_open_pages = max(self.max_open_pages, self.open_pages)
        return page

    async def close(self) -> None:
        self.closed = True
        self.connected = False


def browser_factory(browser: FakeBrowser):
    launches: list[bool] = []

    async def factory(headless: bool) -> FakeBrowser:
        launches.append(headless)
        await asyncio.sleep(0)
        return browser

    factory.launches = launches
    return factory
