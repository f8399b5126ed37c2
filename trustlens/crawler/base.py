"""
Base crawler class with common functionality.
"""

import asyncio
import random
from abc import ABC, abstractmethod

from playwright.async_api import Browser, BrowserContext, Page, async_playwright
from playwright_stealth import Stealth

from trustlens.core.exceptions import CrawlerError
from trustlens.core.logging import get_logger
from trustlens.pipeline.models import PageDocument

logger = get_logger(__name__)

# navigator.webdriver 등 자동화 흔적을 가리는 스크립트 묶음
STEALTH = Stealth()

# User-Agent rotation pool
USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.0 Safari/605.1.15",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
]


class BaseCrawler(ABC):
    """
    Abstract base class for page loaders.

    Provides common functionality for Playwright-based loading:
    - Browser lifecycle management
    - User-Agent rotation
    - Retry logic with exponential backoff
    """

    def __init__(
        self,
        headless: bool = True,
        timeout: int = 30000,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        settle_delay: float = 3.0,
    ):
        """
        Initialize the crawler.

        Args:
            headless: Whether to run browser in headless mode.
            timeout: Default timeout in milliseconds.
            max_retries: Maximum number of retry attempts.
            retry_delay: Base delay between retries in seconds.
            settle_delay: Seconds to wait after load for late review widgets.
        """
        self.headless = headless
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.settle_delay = settle_delay
        self._browser: Browser | None = None
        self._playwright = None

    def _get_random_user_agent(self) -> str:
        """Get a random User-Agent string."""
        return random.choice(USER_AGENTS)

    async def _init_browser(self) -> Browser:
        """Initialize the browser instance."""
        if self._browser is None:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=[
                    "--disable-blink-features=AutomationControlled",
                    "--disable-dev-shm-usage",
                    "--no-sandbox",
                ],
            )
        return self._browser

    async def _create_context(self) -> BrowserContext:
        """Create a new browser context."""
        browser = await self._init_browser()
        return await browser.new_context(
            user_agent=self._get_random_user_agent(),
            viewport={"width": 1920, "height": 1080},
            locale="en-US",
            extra_http_headers={
                "Accept-Language": "en-US,en;q=0.9",
            },
        )

    async def _create_page(self) -> Page:
        """Create a new page with stealth patches and the default timeout applied."""
        context = await self._create_context()
        page = await context.new_page()

        # Amazon robot check 회피
        await STEALTH.apply_stealth_async(page)

        page.set_default_timeout(self.timeout)
        return page

    async def _close_browser(self) -> None:
        """Close the browser and cleanup resources."""
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    async def _scroll_to_load(
        self,
        page: Page,
        scroll_count: int = 5,
        scroll_delay: float = 1.0,
    ) -> None:
        """
        Scroll the page to load lazily rendered reviews.

        Args:
            page: The page to scroll.
            scroll_count: Number of scroll operations.
            scroll_delay: Delay between scrolls in seconds.
        """
        for _ in range(scroll_count):
            await page.evaluate("window.scrollTo(0, document.body.scrollHeight)")
            await asyncio.sleep(scroll_delay)

    async def _retry_with_backoff(
        self,
        func,
        *args,
        **kwargs,
    ):
        """
        Execute a function with exponential backoff retry.

        Args:
            func: Async function to execute.
            *args: Positional arguments for the function.
            **kwargs: Keyword arguments for the function.

        Returns:
            The result of the function.

        Raises:
            CrawlerError: If all retries are exhausted.
        """
        last_error = None
        for attempt in range(self.max_retries):
            try:
                return await func(*args, **kwargs)
            except CrawlerError:
                raise
            except Exception as e:
                last_error = e
                logger.warning(f"Load attempt {attempt + 1}/{self.max_retries} failed: {e}")
                if attempt < self.max_retries - 1:
                    delay = self.retry_delay * (2**attempt)
                    await asyncio.sleep(delay)

        raise CrawlerError(f"Failed after {self.max_retries} retries: {last_error}")

    @abstractmethod
    async def fetch(self, url: str) -> PageDocument:
        """
        Load the product page at the given URL.

        Args:
            url: The product URL to load.

        Returns:
            PageDocument with the rendered HTML.
        """
        pass

    @abstractmethod
    def is_valid_url(self, url: str) -> bool:
        """
        Check if the URL is valid for this crawler.

        Args:
            url: The URL to validate.

        Returns:
            True if the URL is valid for this crawler.
        """
        pass

    async def __aenter__(self):
        """Async context manager entry."""
        await self._init_browser()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self._close_browser()
