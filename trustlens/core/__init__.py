"""
Core 모듈.

로깅, 예외 처리 등 공통 기능을 제공합니다.
"""

from trustlens.core.logging import get_logger, log_context, log_exception, setup_logging
from trustlens.core.exceptions import (
    TrustLensError,
    ScoringFailure,
    TransportFailure,
    ParseFailure,
    SchemaFailure,
    ConfigFailure,
    ChannelError,
    StorageError,
    CrawlerError,
    CrawlerTimeoutError,
    CrawlerBlockedError,
)

__all__ = [
    # Logging
    "get_logger",
    "log_context",
    "log_exception",
    "setup_logging",
    # Exceptions
    "TrustLensError",
    "ScoringFailure",
    "TransportFailure",
    "ParseFailure",
    "SchemaFailure",
    "ConfigFailure",
    "ChannelError",
    "StorageError",
    "CrawlerError",
    "CrawlerTimeoutError",
    "CrawlerBlockedError",
]
