"""Utilities module for common helper functions.

This module contains:
- Ignore rules for tree building (.plumbignore)
"""

from plumb.utils.ignore import IgnoreSet, DEFAULT_PATTERNS

__all__ = [
    'IgnoreSet', 'DEFAULT_PATTERNS',
]
