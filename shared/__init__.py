"""
eifscope Shared Module
======================

Common configuration, logging, console and finding models used by the
eifscope image tool.
"""

from shared.config import ScopeConfig

__all__ = ["ScopeConfig"]
