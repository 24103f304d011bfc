"""
Standardized feedback utilities: connection indicator, toast and empty states.

Request failures and server errors reach the user as a single transient
notification; connectivity is shown only as a persistent status badge.
"""

from typing import Optional

import streamlit as st

from logistica.notifications import NotificationCenter


def show_error(message: str, hint: Optional[str] = None) -> None:
    """
    Display a standardized inline error message with optional hint.

    Args:
        message: Main error message to display
        hint: Optional hint text to help users resolve the issue
    """
    st.error(f"⚠️ {message}")
    if hint:
        st.caption(f"💡 {hint}")


def show_empty_state(title: str, subtitle: Optional[str] = None) -> None:
    st.info(f"📭 **{title}**")
    if subtitle:
        st.caption(subtitle)


def render_connection_status(connected: bool) -> None:
    """Render the push channel badge (green when connected, red otherwise)."""
    if connected:
        st.markdown("🟢 **Socket connected**")
    else:
        st.markdown("🔴 **Socket disconnected**")


def render_notification(notifications: NotificationCenter) -> None:
    """Render the visible notification, if it has not expired yet."""
    current = notifications.current()
    if current is not None:
        st.info(current.message)
