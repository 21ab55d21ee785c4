"""Shared helpers for comprehend."""
