"""
UI Components Module.

This module provides reusable feedback components for the logistics
Streamlit app.
"""

from ui.feedback import render_connection_status, render_notification, show_empty_state, show_error

__all__ = [
    "render_connection_status",
    "render_notification",
    "show_empty_state",
    "show_error",
]
