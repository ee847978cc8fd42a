# File: utils/__init__.py
"""Pure Python utilities for Civic Badges.

This module contains pure Python functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Submodules:
    - dt_utils: Timestamp parsing, formatting and epoch conversion
"""

from . import dt_utils

__all__ = ["dt_utils"]
