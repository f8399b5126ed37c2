# Messaging module

from .background import (
    ANALYZE_ACTION,
    GET_ACTION,
    RERUN_ACTION,
    SAVE_ACTION,
    BackgroundService,
)
from .channel import MessageChannel

__all__ = [
    "MessageChannel",
    "BackgroundService",
    "ANALYZE_ACTION",
    "SAVE_ACTION",
    "GET_ACTION",
    "RERUN_ACTION",
]
