"""
Shellpack Scripts - script lookup, import resolution and materialization.

Built-in scripts live in the assets/ folder as package data.
"""

__all__ = []
