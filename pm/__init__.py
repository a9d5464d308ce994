"""
pm - shellpack plugin management CLI tool.

Supports installation, removal, query, enable/disable and script execution.
"""

__all__ = []
