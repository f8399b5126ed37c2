"""
TrustLens Streamlit 팝업.

저장된 마지막 분석 결과를 보여주고, 결과가 없으면 재분석 버튼을 제공합니다.
"""

import asyncio

import streamlit as st

from trustlens.core.exceptions import CrawlerError
from trustlens.core.logging import get_logger, setup_logging
from trustlens.session import TrustLensSession
from trustlens.ui.popup import (
    EMPTY_MESSAGE,
    NO_ISSUES_MESSAGE,
    RETRY_LABEL,
    PopupView,
    build_popup_view,
)
from trustlens.utils.config import settings

logger = get_logger(__name__)


# =============================================================================
# 세션 상태 초기화
# =============================================================================

def init_session_state():
    """세션 상태 초기화."""
    # 분석 세션 (문서/저장소/Provider를 재실행 사이에 유지)
    if "session" not in st.session_state:
        st.session_state.session = TrustLensSession()

    # 마지막으로 분석한 URL
    if "last_url" not in st.session_state:
        st.session_state.last_url = ""


def get_session() -> TrustLensSession:
    return st.session_state.session


async def _rerun(session: TrustLensSession, url: str):
    """rerunAnalysis 트리거로 재분석 (불러온 페이지가 없으면 먼저 불러옴)."""
    async with session:
        return await session.trigger_rerun(url)


def render_view(view: PopupView) -> None:
    """분석 결과 목록 렌더링."""
    st.metric("Product Suspicion Score", f"{view.average_score}%")

    for entry in view.entries:
        with st.container(border=True):
            header, badge = st.columns([4, 1])
            header.subheader(entry.title)
            badge.markdown(
                f"<span style='color:{entry.color};font-weight:bold'>{entry.score}%</span>",
                unsafe_allow_html=True,
            )
            st.caption(entry.preview)

            if entry.issue_lines:
                st.markdown("**Potential Issues Detected:**")
                for line in entry.issue_lines:
                    st.markdown(f"- {line}")
            else:
                st.markdown(f"*{NO_ISSUES_MESSAGE}*")


def main():
    setup_logging(settings.log_level, log_file=settings.log_file, log_dir=settings.log_dir)
    st.set_page_config(page_title="TrustLens", page_icon="🔍", layout="centered")
    st.title("🔍 TrustLens Review Analysis")
    init_session_state()

    url = st.text_input(
        "Product URL",
        value=st.session_state.last_url,
        placeholder="https://www.amazon.com/dp/...",
    )

    view = build_popup_view(get_session().store.get_analysis())

    if view.is_empty:
        st.info(EMPTY_MESSAGE)
        retry = st.button(RETRY_LABEL, type="primary")
    else:
        render_view(view)
        retry = st.button("Analyze Again")

    if retry:
        if not url:
            st.warning("Enter a product URL to analyze.")
            return

        st.session_state.last_url = url
        with st.spinner("Analyzing reviews..."):
            try:
                run = asyncio.run(_rerun(get_session(), url))
            except (ValueError, CrawlerError) as e:
                st.error(f"Failed to load the page: {e}")
                return

        if run is None or run.is_empty:
            st.warning(EMPTY_MESSAGE)
        else:
            st.rerun()


if __name__ == "__main__":
    main()
