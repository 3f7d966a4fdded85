"""Streamlit user interface for the roster."""
