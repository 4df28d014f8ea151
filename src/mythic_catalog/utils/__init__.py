"""Utility helpers for mythic-catalog."""
