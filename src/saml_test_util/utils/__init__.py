"""Utility helpers and exception types."""
