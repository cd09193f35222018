"""Utility helpers for the prompt service."""

from .text import truncate_text

__all__ = [
    "truncate_text",
]
