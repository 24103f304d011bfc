"""
Utility modules for the Streamlit frontend.

This package contains:
- session: Per-browser-session LogisticsClient and cart key storage
"""
