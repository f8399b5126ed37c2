# UI module

from .presenter import BADGE_CLASS, UI_BLOCK_ID, PagePresenter, get_score_color
from .popup import PopupEntry, PopupView, build_popup_view

__all__ = [
    "PagePresenter",
    "UI_BLOCK_ID",
    "BADGE_CLASS",
    "get_score_color",
    "PopupEntry",
    "PopupView",
    "build_popup_view",
]
