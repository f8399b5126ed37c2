"""
Amazon product page loader.
"""

from urllib.parse import urlparse

from playwright.async_api import Page, TimeoutError as PlaywrightTimeout

from trustlens.core.exceptions import CrawlerBlockedError, CrawlerTimeoutError
from trustlens.core.logging import get_logger

from .base import BaseCrawler, PageDocument

logger = get_logger(__name__)


class AmazonCrawler(BaseCrawler):
    """
    Loads Amazon product pages for review analysis.

    Handles:
    - Waiting for the review widgets to render
    - Captcha / robot-check detection
    """

    HOST_FRAGMENT = "amazon."
    REVIEW_LIST_SELECTOR = '[data-hook="review"]'
    CAPTCHA_MARKERS = (
        "validatecaptcha",
        "enter the characters you see below",
        "to discuss automated access to amazon data",
    )

    def is_valid_url(self, url: str) -> bool:
        """Check if the URL points at an Amazon storefront."""
        try:
            parsed = urlparse(url)
        except ValueError:
            return False
        return parsed.scheme in ("http", "https") and self.HOST_FRAGMENT in (parsed.hostname or "")

    async def _check_blocked(self, page: Page) -> None:
        """Raise if Amazon served a robot check instead of the product."""
        content = (await page.content()).lower()
        if any(marker in content for marker in self.CAPTCHA_MARKERS):
            raise CrawlerBlockedError(
                "Amazon served a robot check instead of the product page.",
                url=page.url,
            )

    async def _load(self, url: str) -> PageDocument:
        page = await self._create_page()
        try:
            try:
                await page.goto(url, wait_until="domcontentloaded")
                await page.wait_for_load_state("load")
            except PlaywrightTimeout as e:
                raise CrawlerTimeoutError(url=url, timeout=self.timeout) from e

            await self._check_blocked(page)

            # Reviews are often injected after load
            await page.wait_for_timeout(self.settle_delay * 1000)
            await self._scroll_to_load(page, scroll_count=3, scroll_delay=0.5)

            html = await page.content()
            logger.info(f"Loaded {page.url} ({len(html)} bytes)")
            return PageDocument.from_html(html, page.url, is_top_level=True)
        finally:
            await page.context.close()

    async def fetch(self, url: str) -> PageDocument:
        return await self._retry_with_backoff(self._load, url)
