"""
HTML-to-PDF rendering engines.

ChromiumEngine drives a headless Chromium through Playwright. Each call
launches its own browser, so the number of live browsers equals the number of
conversions the scheduler runs at once.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from ..models import ConversionSettings


DIAGRAMS_READY_JS = """() => {
  const diagrams = document.querySelectorAll('.mermaid');
  return diagrams.length > 0 &&
    Array.from(diagrams).every(el => el.querySelector(':scope > svg') instanceof SVGElement);
}"""


class RenderEngine(ABC):
    """
    Abstract base class for engines that print an HTML page to PDF.
    """

    @abstractmethod
    async def print_pdf(self, page_html: str, target: Path, wait_for_diagrams: bool = False) -> bool:
        """
        Render ``page_html`` into a PDF at ``target``.

        Args:
            page_html: Complete HTML document
            target: Output PDF path; its directory already exists
            wait_for_diagrams: Wait (bounded) for diagram rendering before printing

        Returns:
            False if diagrams were expected but not ready in time, True otherwise
        """
        pass


class ChromiumEngine(RenderEngine):
    """
    Prints pages with a headless Chromium launched through Playwright.
    """

    def __init__(self, settings: Optional[ConversionSettings] = None):
        self.settings = settings or ConversionSettings()

    async def print_pdf(self, page_html: str, target: Path, wait_for_diagrams: bool = False) -> bool:
        diagrams_ready = True
        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(
                headless=self.settings.headless,
                args=['--disable-dev-shm-usage', '--disable-gpu']
            )
            try:
                page = await browser.new_page()
                await page.set_content(page_html, wait_until="networkidle")

                if wait_for_diagrams:
                    try:
                        await page.wait_for_function(
                            DIAGRAMS_READY_JS,
                            timeout=self.settings.diagram_timeout * 1000
                        )
                    except PlaywrightTimeoutError:
                        diagrams_ready = False

                await page.pdf(
                    path=str(target),
                    format=self.settings.page_format,
                    print_background=self.settings.print_background
                )
            finally:
                await browser.close()

        logging.debug(f"Chromium printed {target}")
        return diagrams_ready
