"""Utility helpers for fact feed."""
