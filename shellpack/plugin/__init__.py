"""
Shellpack Plugin System - plugin packages and their lifecycle.

This module handles:
- Archive extraction
- Manifest (info.json) validation
- The persisted plugin registry
"""

__all__ = []
