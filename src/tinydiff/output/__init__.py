"""Renderers for terminal and JSON output."""
