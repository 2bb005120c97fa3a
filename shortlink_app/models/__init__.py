"""
Database models for the URL shortener.
"""

from .link import ShortLink

__all__ = ["ShortLink"]
