# Crawler module

from .base import (
    BaseCrawler,
    PageDocument,
    USER_AGENTS,
)
from .amazon import AmazonCrawler


def get_crawler(url: str, **kwargs) -> BaseCrawler:
    """
    Factory function to get the appropriate crawler for a URL.

    Args:
        url: The product URL to load.
        **kwargs: Additional arguments to pass to the crawler.

    Returns:
        An instance of the appropriate crawler.

    Raises:
        ValueError: If no crawler supports the given URL.
    """
    crawlers = [
        AmazonCrawler(**kwargs),
    ]

    for crawler in crawlers:
        if crawler.is_valid_url(url):
            return crawler

    raise ValueError(f"No crawler available for URL: {url}")


__all__ = [
    "BaseCrawler",
    "PageDocument",
    "USER_AGENTS",
    "AmazonCrawler",
    "get_crawler",
]
