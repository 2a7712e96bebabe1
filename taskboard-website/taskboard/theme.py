import html

import streamlit as st
from streamlit.errors import StreamlitAPIException

from taskboard.summary import SEVERITY_CRITICAL, SEVERITY_NEUTRAL, SEVERITY_WARNING

SEVERITY_COLORS = {
    SEVERITY_CRITICAL: "#d63031",
    SEVERITY_WARNING: "#e17055",
    SEVERITY_NEUTRAL: "#636e72",
}

BOARD_CSS = """
.tb-card { background:#fff; border-radius:12px; border:1px solid #dce6f1; padding:.7rem .8rem; margin-bottom:.6rem; box-shadow:0 2px 8px -4px rgba(11,99,214,0.18); }
.tb-card-moving { opacity:.6; }
.tb-card-title { font-weight:600; color:#0b2140; white-space:nowrap; overflow:hidden; text-overflow:ellipsis; }
.tb-card-meta { color:#6b7b8f; font-size:.8rem; }
.tb-badge { display:inline-block; font-size:.7rem; font-weight:700; border-radius:30px; padding:.15rem .6rem; color:#fff; letter-spacing:.5px; }
.tb-col-header { font-weight:700; letter-spacing:.5px; margin-bottom:.5rem; }
"""


def severity_color(severity: str) -> str:
    return SEVERITY_COLORS.get(severity, SEVERITY_COLORS[SEVERITY_NEUTRAL])


def badge_html(label: str, severity: str) -> str:
    return f'<span class="tb-badge" style="background:{severity_color(severity)};">{html.escape(label)}</span>'


def card_html(title: str, meta: str, badge_label: str, severity: str, *, moving: bool = False) -> str:
    """Board card markup; user text is escaped."""
    css = "tb-card tb-card-moving" if moving else "tb-card"
    return (
        f'<div class="{css}"><div class="tb-card-title">{html.escape(title)}</div>'
        f'<div class="tb-card-meta">{html.escape(meta)} {badge_html(badge_label, severity)}</div></div>'
    )


def set_theme(
    page_title: str = "Task Board",
    page_icon: str = "📋",
    layout: str = "wide",
    initial_sidebar_state: str = "expanded",
):
    """Configure Streamlit page & inject the board CSS.

    Safe to call once at top of each page. Subsequent calls will be ignored by
    Streamlit for page_config but CSS will still be (re)injected.
    """
    try:
        st.set_page_config(
            page_title=page_title,
            page_icon=page_icon,
            layout=layout,
            initial_sidebar_state=initial_sidebar_state,
        )
    except StreamlitAPIException:
        # set_page_config can only be called once; ignore if already set.
        pass
    st.markdown(f"<style>{BOARD_CSS}</style>", unsafe_allow_html=True)
