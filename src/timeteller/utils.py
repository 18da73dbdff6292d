"""Shared utilities for timeteller modules."""

from __future__ import annotations


def drop_none(d: dict) -> dict:
    """Remove None values so Firestore merges leave stored fields untouched."""
    return {k: v for k, v in d.items() if v is not None}
