"""Fake Playwright objects so audits run without a real browser.

FakePage keeps a tiny DOM model: ``elements`` maps a CSS locator to the ids of
the elements it matches, and ``badges`` records the number shown on each
marked element id, mirroring what MARK_SCRIPT does in the page.
"""
import asyncio
from pathlib import Path

import pytest


class FakePage:
    def __init__(self, browser):
        self.browser = browser
        self.url = None
        self.closed = False
        self.styles = []
        self.badges = {}
        self.eval_calls = []
        self.screenshots = []

    async def goto(self, url, wait_until=None, timeout=None):
        self.url = url
        self.browser.navigations.append((url, wait_until, timeout))
        delay = self.browser.delays.get(url, 0)
        if delay:
            await asyncio.sleep(delay)
        if url in self.browser.fail_urls:
            raise TimeoutError(f"Timeout {timeout}ms exceeded navigating to {url}")

    async def add_style_tag(self, content=None, **kwargs):
        self.styles.append(content)

    async def eval_on_selector_all(self, selector, expression, arg=None):
        self.eval_calls.append((selector, arg))
        marked = 0
        for element_id in self.browser.elements.get(selector, []):
            if element_id in self.badges:
                continue
            self.badges[element_id] = arg
            marked += 1
        return marked

    async def screenshot(self, path=None, **kwargs):
        self.screenshots.append((path, kwargs))
        Path(path).write_bytes(b"\xff\xd8fake-jpeg")

    async def pdf(self, path=None, **kwargs):
        if self.browser.pdf_error:
            raise self.browser.pdf_error
        Path(path).write_bytes(b"%PDF-fake")

    async def close(self):
        self.closed = True
        if self.browser.page_close_error:
            raise self.browser.page_close_error


class FakeContext:
    def __init__(self, browser):
        self.browser = browser
        self.pages = []
        self.closed = False

    async def new_page(self):
        page = FakePage(self.browser)
        self.pages.append(page)
        self.browser.pages.append(page)
        return page

    async def close(self):
        self.closed = True


class FakeBrowser:
    def __init__(self, fail_urls=(), delays=None, elements=None, page_close_error=None, new_page_error=None, pdf_error=None):
        self.page_close_error = page_close_error
        self.new_page_error = new_page_error
        self.pdf_error = pdf_error
        self.fail_urls = set(fail_urls)
        self.delays = delays or {}
        self.elements = elements or {}
        self.contexts = []
        self.pages = []
        self.navigations = []

    async def new_context(self):
        ctx = FakeContext(self)
        self.contexts.append(ctx)
        return ctx

    async def new_page(self):
        if self.new_page_error:
            raise self.new_page_error
        page = FakePage(self)
        self.pages.append(page)
        return page


@pytest.fixture
def fake_browser():
    """Factory for FakeBrowser instances."""
    return FakeBrowser
